"""Exceptions raised by the record store and its collaborators."""


class HealthDashError(Exception):
    """Base class for every error reported by healthdash."""


class NotFoundError(HealthDashError, LookupError):
    """The requested record file does not exist."""


class PositionNotFoundError(NotFoundError):
    """A record file has no line at the requested position."""

    def __init__(self, position: int, path=None):
        self.position = position
        self.path = path
        super().__init__(f"Record {position} not found")


class ParseError(HealthDashError, ValueError):
    """A stored line does not match the template of its category."""

    def __init__(self, category, line: str, reason: str = ""):
        self.category = category
        self.line = line
        msg = f"Cannot parse {category.value} record: {line!r}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class StorageError(HealthDashError):
    """An open/write/remove/rename on a data file failed."""


class InvalidUsernameError(HealthDashError, ValueError):
    """A username cannot be used as part of a file name."""
