"""General API information read from the main API file.

    # @APIVersion 1.0.0
    # @APITitle Widget Shop API
    # @APIDescription Everything about widgets
    # @Contact api@widgets.example
    # @TermsOfServiceUrl http://widgets.example/terms
    # @License BSD
    # @LicenseUrl http://widgets.example/license
"""

import ast
from pathlib import Path
from typing import Sequence

from swaggerlite.errors import GeneralInfoNotFoundError, SourceParseError
from swaggerlite.log import get_logger
from swaggerlite.parser.annotations import GENERAL_TAGS, scan_comment
from swaggerlite.parser.base import GeneralInfo
from swaggerlite.parser.source import read_comments

logger = get_logger("general")

_FIELDS = {
    "APIVersion": "api_version",
    "APITitle": "title",
    "APIDescription": "description",
    "Contact": "contact",
    "TermsOfServiceUrl": "terms_of_service_url",
    "License": "license",
    "LicenseUrl": "license_url",
    "BasePath": "base_path",
}


def parse_general_info(path: Path) -> GeneralInfo:
    """Read general tags from every comment and the docstring of ``path``.

    Raises OSError when the file cannot be read and SourceParseError when it
    is not UTF-8 encoded Python.
    """
    try:
        source = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise SourceParseError(str(path), str(exc)) from exc
    try:
        docstring = ast.get_docstring(ast.parse(source, filename=str(path))) or ""
        comments, _ = read_comments(source)
    except SyntaxError as exc:
        raise SourceParseError(str(path), str(exc)) from exc

    text = "\n".join([comments[line] for line in sorted(comments)] + docstring.splitlines())
    values: dict[str, str] = {}
    for annotation in scan_comment(text, GENERAL_TAGS):
        values.setdefault(_FIELDS[annotation.tag], annotation.value)
    return GeneralInfo(**values)


def find_general_info(main_file: str, roots: Sequence[Path]) -> GeneralInfo:
    """Try ``main_file`` under each root in turn; fail only if every root fails."""
    failures = []
    for root in roots:
        path = Path(root) / main_file
        try:
            info = parse_general_info(path)
        except OSError as exc:
            failures.append(f"{path}: {exc.strerror or exc}")
            continue
        logger.info(f"Read general API info from {path}")
        return info
    raise GeneralInfoNotFoundError(main_file, failures)
