"""Validates rendered output files before they are written to disk."""

import ast
import json

import yaml


def validate_python(files: dict[str, str]) -> dict[str, str]:
    """Check Python files for syntax errors.

    Returns dict of {filename: error_message} for files with errors.
    """
    errors = {}
    for filename, content in files.items():
        if not filename.endswith(".py"):
            continue
        try:
            ast.parse(content, filename=filename)
        except SyntaxError as e:
            errors[filename] = f"SyntaxError: {e.msg} (line {e.lineno})"
    return errors


def validate_yaml(files: dict[str, str]) -> dict[str, str]:
    """Check YAML files for format errors."""
    errors = {}
    for filename, content in files.items():
        if not filename.endswith((".yaml", ".yml")):
            continue
        try:
            yaml.safe_load(content)
        except yaml.YAMLError as e:
            errors[filename] = f"YAMLError: {e}"
    return errors


def validate_json(files: dict[str, str]) -> dict[str, str]:
    """Check JSON files for format errors."""
    errors = {}
    for filename, content in files.items():
        if not filename.endswith(".json"):
            continue
        try:
            json.loads(content)
        except json.JSONDecodeError as e:
            errors[filename] = f"JSONDecodeError: {e.msg} (line {e.lineno})"
    return errors


FORMAT_VALIDATORS = {
    "json": (validate_json, ".json"),
    "yaml": (validate_yaml, ".yaml"),
    "python": (validate_python, ".py"),
}


def validate_output(content: str, output_format: str) -> str | None:
    """Check rendered output by its format, whatever file name it is written to.

    Returns the error message, or None when the output is valid or the
    format (markdown) has nothing to check.
    """
    if output_format not in FORMAT_VALIDATORS:
        return None
    validate, suffix = FORMAT_VALIDATORS[output_format]
    name = f"output{suffix}"
    return validate({name: content}).get(name)
