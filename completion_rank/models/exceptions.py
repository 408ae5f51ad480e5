"""Exception hierarchy for completion-rank.

Scoring and proximity never raise for ordinary data; "no match" and
"provider unavailable" are values, not errors. These exceptions cover the
configuration layer and provider failures that are caught before they reach
the ranking pipeline.
"""


class RankError(Exception):
    """Base exception for all completion-rank errors.

    Carries an optional suggestion so callers can surface a short hint
    next to the message.
    """

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message} ({self.suggestion})"
        return self.message


class ConfigError(RankError):
    """Configuration is invalid or missing."""

    pass


class ConfigValidationError(ConfigError):
    """Configuration value failed validation."""

    pass


class ProviderError(RankError):
    """An external selection-range or word-range provider failed."""

    pass
