"""
Error taxonomy for the smart store.

Every failure raised by the domain, the service layer or the command
interpreter is a StoreException. Subclasses identify the kind of failure so
the outer layers (console output, REST status codes) can react to it
without parsing messages.
"""

from pathlib import Path
from typing import Optional, Union


class StoreException(Exception):
    """
    Base exception for all smart store errors.

    Attributes:
        action: The operation that was attempted (e.g. "Add Basket Product")
        reason: Why it failed
    """
    kind = "StoreError"

    def __init__(self, action: str, reason: str):
        self.action = action
        self.reason = reason
        super().__init__(f"{action}: {reason}")

    def __str__(self) -> str:
        return f"{self.action}: {self.reason}"


class NotFoundError(StoreException):
    """A referenced entity does not exist."""
    kind = "NotFound"


class DuplicateEntityError(StoreException):
    """An entity with the same id already exists."""
    kind = "DuplicateEntity"


class InvalidArgumentError(StoreException):
    """A numeric value is out of range or an enum value is malformed."""
    kind = "InvalidArgument"


class PreconditionFailedError(StoreException):
    """A business rule was violated (co-location, basket ownership)."""
    kind = "PreconditionFailed"


class UnsupportedOperationError(StoreException):
    """The entity exists but lacks the capability (e.g. commanding a sensor)."""
    kind = "UnsupportedOperation"


class CommandParseError(StoreException):
    """A command line could not be tokenized or matched to an operation."""
    kind = "ParseError"

    def __init__(self, reason: str, line: str = ""):
        self.line = line
        super().__init__("Parse Command", f"{reason} [{line}]" if line else reason)


class ScriptIOError(StoreException):
    """A command script file could not be read."""
    kind = "IOFailure"

    def __init__(
        self,
        path: Union[str, Path],
        original_error: Optional[Union[OSError, UnicodeDecodeError]] = None,
    ):
        self.path = Path(path)
        self.original_error = original_error
        self.error_name = type(original_error).__name__ if original_error else "OSError"
        super().__init__("Process Command File", f"{self.error_name}: {self.path}")
