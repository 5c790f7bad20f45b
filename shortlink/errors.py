"""Exception types for the short link service."""


class ShortenerError(Exception):
    """Base class for errors surfaced to callers of the service.

    Each subclass carries a stable ``code`` that transports (HTTP, CLI)
    report verbatim so clients can branch on it.
    """

    code = "error"


class InvalidUrlError(ShortenerError, ValueError):
    """The destination URL is not a valid absolute http(s) URL."""

    code = "invalid_url"


class InvalidAliasError(ShortenerError, ValueError):
    """The requested short code is malformed or not allowed."""

    code = "invalid_alias"


class DuplicateAliasError(ShortenerError):
    """The requested short code is already taken."""

    code = "duplicate_alias"

    def __init__(self, short_code: str):
        super().__init__(
            f"The alias '{short_code}' is already in use. Please choose a different one."
        )
        self.short_code = short_code


class AllocationExhaustedError(ShortenerError):
    """No free generated code was found within the retry budget."""

    code = "allocation_exhausted"


class LinkNotFoundError(ShortenerError, LookupError):
    """No live link matches the given short code or id."""

    code = "not_found"


class CodeConflictError(Exception):
    """Raised by stores when a short code is held by another live link or retired.

    Never leaves the service layer; it is translated to DuplicateAliasError.
    """

    def __init__(self, short_code: str):
        super().__init__(f"Short code '{short_code}' already exists")
        self.short_code = short_code
