"""Markdown rendering of an API document."""

from swaggerlite.parser.base import ApiDeclaration, Document, Model, Operation, describe_type


def _cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def _table(headers: list[str], rows: list[list[str]]) -> list[str]:
    lines = [
        "| " + " | ".join(headers) + " |",
        "|" + "|".join("---" for _ in headers) + "|",
    ]
    lines.extend("| " + " | ".join(_cell(value) for value in row) + " |" for row in rows)
    return lines


def _render_operation(operation: Operation) -> list[str]:
    lines = [f"### {operation.method} {operation.path}", ""]
    if operation.summary:
        lines.extend([f"> {operation.summary}", ""])
    if operation.notes:
        lines.extend([operation.notes, ""])
    lines.extend([f"Nickname: `{operation.nickname}` | Returns: `{describe_type(operation.type)}`", ""])

    if operation.parameters:
        lines.extend(
            _table(
                ["Name", "In", "Type", "Required", "Description"],
                [
                    [p.name, p.location, describe_type(p.type), "yes" if p.required else "no", p.description]
                    for p in operation.parameters
                ],
            )
        )
        lines.append("")
    if operation.responses:
        lines.extend(
            _table(
                ["Code", "Type", "Message"],
                [
                    [str(r.code), describe_type(r.type) if r.type is not None else "", r.message]
                    for r in operation.responses
                ],
            )
        )
        lines.append("")
    return lines


def _render_model(model: Model) -> list[str]:
    lines = [f"#### {model.name}", ""]
    if not model.properties:
        return lines + ["_No exported fields._", ""]
    lines.extend(
        _table(
            ["Field", "Type", "Required", "Description"],
            [
                [p.name, describe_type(p.type), "yes" if p.required else "no", p.description]
                for p in model.properties
            ],
        )
    )
    lines.append("")
    return lines


def _render_declaration(resource: str, declaration: ApiDeclaration, description: str) -> list[str]:
    lines = [f"## {resource}", ""]
    if description:
        lines.extend([description, ""])
    for operation in declaration.operations:
        lines.extend(_render_operation(operation))
    if declaration.models:
        lines.extend(["### Models", ""])
        for model in declaration.models.values():
            lines.extend(_render_model(model))
    return lines


def render_markdown(document: Document) -> str:
    """Render the listing and every declaration as one Markdown document."""
    listing = document.listing
    lines = [f"# {listing.info.title or 'API Documentation'}", ""]
    if listing.info.description:
        lines.extend([listing.info.description, ""])

    details = [
        ("API version", listing.api_version),
        ("Base path", listing.base_path),
        ("Contact", listing.info.contact),
        ("Terms of service", listing.info.terms_of_service_url),
        ("License", listing.info.license),
        ("License URL", listing.info.license_url),
    ]
    lines.extend(f"- **{label}:** {value}" for label, value in details if value)
    lines.append("")

    lines.extend(_table(["Resource", "Description"], [[f"[{ref.path}](#{ref.path})", ref.description] for ref in listing.apis]))
    lines.append("")

    descriptions = {ref.path: ref.description for ref in listing.apis}
    for resource, declaration in document.declarations.items():
        lines.extend(_render_declaration(resource, declaration, descriptions.get(resource, "")))
    return "\n".join(lines).rstrip() + "\n"
