"""Run configuration: YAML file values overlaid with command-line options."""

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from swaggerlite.errors import ConfigError
from swaggerlite.parser.base import PRIMITIVES
from swaggerlite.parser.source import normalize_package

SEARCH_PATH_ENV = "SWAGGERLITE_PATH"

OUTPUT_FORMATS = ("json", "yaml", "markdown", "python")

DEFAULT_OUTPUTS = {
    "json": "swagger.json",
    "yaml": "swagger.yaml",
    "markdown": "API.md",
    "python": "generated_swagger.py",
}

# Wrapper types that serialize themselves as a primitive.
DEFAULT_ALIASES = {
    "NullString": "string",
    "NullInt64": "integer",
    "NullFloat64": "number",
    "NullBool": "boolean",
    "datetime": "string",
    "date": "string",
    "time": "string",
    "UUID": "string",
    "Decimal": "number",
}

_PRIMITIVE_SYNONYMS = {
    "str": "string",
    "int": "integer",
    "float": "number",
    "bool": "boolean",
}


def normalize_primitive(name: str) -> str:
    value = _PRIMITIVE_SYNONYMS.get(name.strip(), name.strip())
    if value not in PRIMITIVES:
        raise ValueError(f"{name!r} is not one of {', '.join(PRIMITIVES)}")
    return value


class GeneratorConfig(BaseModel):
    """Everything one run needs."""

    api_packages: list[str] = []
    main_api_file: str = ""
    base_path: str = ""
    search_roots: list[Path] = []
    exclusions: list[str] = []
    aliases: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_ALIASES))
    output_format: Literal["json", "yaml", "markdown", "python"] = "json"
    output: Path | None = None

    @field_validator("aliases")
    @classmethod
    def _check_aliases(cls, value: dict[str, str]) -> dict[str, str]:
        return {name: normalize_primitive(kind) for name, kind in value.items()}

    @field_validator("api_packages", "exclusions", mode="before")
    @classmethod
    def _split_lists(cls, value):
        if isinstance(value, str):
            return split_list(value)
        return value

    def roots(self) -> list[Path]:
        """Configured search roots, else ``$SWAGGERLITE_PATH``, else the working directory."""
        if self.search_roots:
            return list(self.search_roots)
        env = os.environ.get(SEARCH_PATH_ENV, "")
        roots = [Path(entry) for entry in env.split(os.pathsep) if entry]
        return roots or [Path.cwd()]

    def main_file(self) -> str:
        """The main API file, defaulting to ``main.py`` of the first API package."""
        if self.main_api_file:
            return self.main_api_file
        if not self.api_packages:
            raise ConfigError("no API package configured")
        return f"{normalize_package(self.api_packages[0]).replace('.', '/')}/main.py"

    def output_path(self) -> Path:
        return self.output or Path(DEFAULT_OUTPUTS[self.output_format])


def split_list(value: str) -> list[str]:
    """``"a, b,,c"`` -> ``["a", "b", "c"]``."""
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_alias(value: str) -> tuple[str, str]:
    """Parse ``NAME=primitive`` from the command line."""
    name, sep, kind = value.partition("=")
    if not sep or not name.strip():
        raise ConfigError(f"alias {value!r} must look like NAME=primitive")
    try:
        return name.strip(), normalize_primitive(kind)
    except ValueError as exc:
        raise ConfigError(f"alias {value!r}: {exc}") from exc


def load_config_file(config_path: Path) -> dict:
    """Read a YAML config file; relative search roots are taken from its directory."""
    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"cannot read {config_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"{config_path} is not valid YAML: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a mapping at the root")

    if "search_roots" in data:
        roots = data["search_roots"]
        if isinstance(roots, str):
            roots = [roots]
        data["search_roots"] = [config_path.parent / root for root in roots]
    return data


def build_config(file_values: dict | None = None, **overrides) -> GeneratorConfig:
    """File values first, then non-empty overrides; aliases merge on top of the defaults."""
    values = dict(file_values or {})
    aliases = dict(DEFAULT_ALIASES)
    aliases.update(values.pop("aliases", None) or {})
    aliases.update(overrides.pop("aliases", None) or {})

    for key, value in overrides.items():
        if value not in (None, "", [], ()):
            values[key] = value
    values["aliases"] = aliases

    try:
        return GeneratorConfig(**values)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
