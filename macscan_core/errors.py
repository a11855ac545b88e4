class MacscanError(Exception):
    """Base error for macscan."""


class ValidationError(MacscanError):
    """Input validation failure."""


class DeliveryError(MacscanError):
    """Email delivery failed. Not retried."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
