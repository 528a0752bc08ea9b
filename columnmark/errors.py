"""Exception types raised by columnmark."""


class ColumnmarkError(Exception):
    """Base class for all columnmark errors."""


class PolicyResolutionError(ColumnmarkError):
    """A custom column-limit resolver failed or returned a bad value."""


class ClassificationUnavailable(ColumnmarkError):
    """Comment/code classification could not be determined for an offset."""


class InvalidLimitError(ColumnmarkError, ValueError):
    """A limit passed to a set-limit operation is not a positive integer."""

    def __init__(self, value):
        super().__init__(f"Column limit must be a positive integer, got {value!r}")
        self.value = value
