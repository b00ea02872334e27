class BoardError(Exception):
    """Base class for schedule board errors."""
    pass


class ValidationError(BoardError):
    """Raised when user input is rejected. The message is shown as-is."""

    def __init__(self, message: str, field: str = ""):
        super().__init__(message)
        self.message = message
        self.field = field


class LockedOutError(BoardError):
    """Raised when an unlock attempt is made while the lockout is active."""

    def __init__(self, remaining_seconds: int):
        super().__init__(f"Account locked. Please wait {remaining_seconds} seconds.")
        self.remaining_seconds = remaining_seconds


class SyncError(BoardError):
    """Raised inside the sync client when a pull or push cannot complete."""
    pass
