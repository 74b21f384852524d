"""Domain-specific errors for edidrandr."""


class EdidRandrError(Exception):
    """Base error for edidrandr."""


class UsageError(EdidRandrError):
    """Raised when command-line flags are malformed or contradictory."""


class StrictMatchFailure(EdidRandrError):
    """Raised when all-or-abort matching leaves identifiers unmatched."""

    def __init__(self, unmatched: tuple[str, ...]) -> None:
        self.unmatched = tuple(unmatched)
        super().__init__(
            f"Failed to match serial(s) '{' '.join(self.unmatched)}' to an output."
        )


class StatusUnavailableError(EdidRandrError):
    """Raised when the xrandr status dump cannot be obtained."""


class ApplyError(EdidRandrError):
    """Raised when the apply command cannot be started."""


class ProfileValidationError(EdidRandrError):
    """Raised when a profile file does not conform to schema or semantics."""


class ProfileLoadError(EdidRandrError):
    """Raised when reading profile sources fails."""
