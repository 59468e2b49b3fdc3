"""Generates a Python module that serves the documentation over WSGI.

The module embeds the resource listing and every API declaration as JSON
strings, so the documented service can mount ``swagger_api_app(prefix)``
without swaggerlite installed.
"""

import json

from swaggerlite.generator.swagger import dump_declaration, dump_listing
from swaggerlite.parser.base import Document

MODULE_TEMPLATE = '''"""Swagger documentation for {{title}}.

This file is generated automatically. Do not edit it manually.
"""

SWAGGER_RESOURCE_LISTING = {{resource_listing}}

SWAGGER_API_DESCRIPTIONS = {{api_descriptions}}


def swagger_api_app(prefix=""):
    """WSGI app: ``prefix/`` serves the listing, ``prefix/<resource>`` a declaration."""

    def app(environ, start_response):
        path = environ.get("PATH_INFO", "")
        if path.startswith(prefix):
            path = path[len(prefix):]
        resource = path.strip("/")

        if environ.get("REQUEST_METHOD") == "OPTIONS":
            start_response("204 No Content", [
                ("Access-Control-Allow-Origin", "*"),
                ("Access-Control-Allow-Methods", "GET, POST, PUT, DELETE, OPTIONS"),
                ("Access-Control-Allow-Headers", "accept, authorization, content-type"),
                ("Access-Control-Max-Age", "1800"),
            ])
            return [b""]

        headers = [
            ("Access-Control-Allow-Origin", "*"),
            ("Access-Control-Allow-Methods", "GET"),
            ("Content-Type", "application/json"),
        ]
        if not resource:
            body = SWAGGER_RESOURCE_LISTING
        elif resource in SWAGGER_API_DESCRIPTIONS:
            body = SWAGGER_API_DESCRIPTIONS[resource]
        else:
            start_response("404 Not Found", headers)
            return [b""]
        start_response("200 OK", headers)
        return [body.encode("utf-8")]

    return app
'''


def _json_literal(data: dict) -> str:
    return repr(json.dumps(data, indent=4, ensure_ascii=False))


def render_module(document: Document) -> str:
    descriptions = "".join(
        f"\n    {resource!r}: {_json_literal(dump_declaration(declaration))},"
        for resource, declaration in document.declarations.items()
    )
    title = (document.listing.info.title or "the API").replace("\\", "").replace('"', "'")
    module = MODULE_TEMPLATE.replace("{{title}}", title)
    module = module.replace("{{resource_listing}}", _json_literal(dump_listing(document.listing)))
    module = module.replace("{{api_descriptions}}", "{" + descriptions + ("\n}" if descriptions else "}"))
    return module
