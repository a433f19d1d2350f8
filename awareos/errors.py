"""Exception hierarchy shared by all AwareOS components."""


class AwareOSError(Exception):
    """Base class for AwareOS errors."""


class ValidationError(AwareOSError):
    """A required field is missing or a value is out of range."""


class DuplicateModuleError(ValidationError):
    """An app module with the same name is already registered."""


class NotFoundError(AwareOSError):
    """Unknown app, suggestion or log entry."""


class UnsupportedOperationError(AwareOSError):
    """The target app module does not expose the requested operation."""


class ReasoningTransportError(AwareOSError):
    """The external reasoning service could not be reached or failed."""


class ReasoningParseError(AwareOSError):
    """The reasoning response did not contain a usable decision object."""


class ActionExecutionError(AwareOSError):
    """An approved action failed while being dispatched."""

    def __init__(self, app: str, action: str, message: str):
        super().__init__(f"{app}.{action}: {message}")
        self.app = app
        self.action = action
        self.message = message
