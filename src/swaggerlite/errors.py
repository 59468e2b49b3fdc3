"""Error types raised while extracting API documentation.

``AnnotationError`` is recoverable: the walker logs it as a warning and keeps
going. Every other error aborts the run before any output is written.
"""


class SwaggerLiteError(Exception):
    """Base class for all swaggerlite errors."""


class AnnotationError(SwaggerLiteError):
    """A recognized annotation tag carries a value that cannot be parsed."""

    def __init__(self, tag: str, value: str, reason: str):
        self.tag = tag
        self.value = value
        self.reason = reason
        super().__init__(f"@{tag} {value!r}: {reason}")


class PackageNotFoundError(SwaggerLiteError):
    """A package that is not on the exclusion list cannot be located."""

    def __init__(self, package: str, roots: list[str]):
        self.package = package
        self.roots = roots
        searched = ", ".join(roots) or "<no search roots>"
        super().__init__(f"package {package!r} not found in: {searched}")


class TypeResolutionError(SwaggerLiteError):
    """A type expression matches none of the resolution rules."""

    def __init__(self, type_name: str, declaration: str, reason: str = ""):
        self.type_name = type_name
        self.declaration = declaration
        message = f"cannot resolve type {type_name!r} referenced by {declaration}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class UnresolvedModelError(SwaggerLiteError):
    """A model reference has no entry in the model registry."""

    def __init__(self, names: list[str], resource: str):
        self.names = names
        self.resource = resource
        super().__init__(f"resource {resource!r} references unknown models: {', '.join(names)}")


class GeneralInfoNotFoundError(SwaggerLiteError):
    """The main API file could not be read from any search root."""

    def __init__(self, main_file: str, failures: list[str]):
        self.main_file = main_file
        self.failures = failures
        details = "\n".join(f"    {failure}" for failure in failures)
        super().__init__(f"Error locating main API file {main_file!r}:\n{details}")


class ConfigError(SwaggerLiteError):
    """The configuration file or command-line options are invalid."""


class SourceParseError(SwaggerLiteError):
    """A scanned Python file is not valid Python."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"cannot parse {path}: {reason}")
