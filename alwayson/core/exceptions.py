"""
Custom exceptions for the always-on baseline calculator.

All exceptions inherit from AlwaysOnError for easy catching.
"""


class AlwaysOnError(Exception):
    """Base exception for all always-on calculator errors."""

    pass


class ConfigurationError(AlwaysOnError):
    """Raised when configuration is invalid or missing."""

    pass


class ValidationError(AlwaysOnError):
    """Raised when call-time input or provider data fails validation."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: object = None,
    ):
        super().__init__(message)
        self.field = field
        self.value = value

    def __str__(self) -> str:
        parts = [self.args[0]]
        if self.field:
            parts.append(f"field={self.field}")
        if self.value is not None:
            parts.append(f"value={self.value!r}")
        return " | ".join(parts)


class DataFetchError(AlwaysOnError):
    """Raised when data cannot be fetched from the usage API."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        site_hash: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.source = source
        self.site_hash = site_hash
        self.status_code = status_code

    def __str__(self) -> str:
        parts = [self.args[0]]
        if self.source:
            parts.append(f"source={self.source}")
        if self.site_hash:
            parts.append(f"site={self.site_hash}")
        if self.status_code:
            parts.append(f"status={self.status_code}")
        return " | ".join(parts)


class RateLimitError(DataFetchError):
    """Raised when API rate limit is exceeded."""

    def __init__(
        self,
        source: str,
        retry_after: int | None = None,
    ):
        super().__init__(
            f"Rate limit exceeded for {source}",
            source=source,
            status_code=429,
        )
        self.retry_after = retry_after


class InsufficientDataError(AlwaysOnError):
    """Raised when no readings survive long enough to compute a baseline."""

    def __init__(
        self,
        message: str,
        required: int,
        available: int,
        stage: str | None = None,
    ):
        super().__init__(message)
        self.required = required
        self.available = available
        self.stage = stage

    def __str__(self) -> str:
        return (
            f"{self.args[0]} | "
            f"required={self.required}, available={self.available}"
            + (f", stage={self.stage}" if self.stage else "")
        )


class FilterError(AlwaysOnError):
    """Raised when a filter stage returns something other than a subsequence of its input."""

    def __init__(
        self,
        message: str,
        stage: str | None = None,
    ):
        super().__init__(message)
        self.stage = stage

    def __str__(self) -> str:
        if self.stage:
            return f"{self.args[0]} | stage={self.stage}"
        return self.args[0]
