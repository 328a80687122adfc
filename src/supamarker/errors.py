"""Error hierarchy shared by the parser, the reconciliation engine and the CLI"""


class SupamarkerError(Exception):
    """Base class for every error the CLI reports to the operator."""


class ConfigError(SupamarkerError):
    """Missing credentials, unreadable config file, or gen-config target already present."""


class ParseError(SupamarkerError):
    """Front matter block present but not a valid mapping."""

    def __init__(self, message: str, key: str | None = None):
        self.key = key
        if key:
            message = f"{message} (key: {key})"
        super().__init__(message)


class MissingFrontMatterError(SupamarkerError):
    """Document has no front matter block at all."""


class NotFoundError(SupamarkerError):
    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"Slug '{slug}' not found")


class BackendError(SupamarkerError):
    """A blob or row store call failed. The native error is chained as __cause__."""

    def __init__(self, operation: str, detail: object):
        self.operation = operation
        super().__init__(f"{operation} failed: {detail}")
