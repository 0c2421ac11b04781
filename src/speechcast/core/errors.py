"""Speechcast error taxonomy."""


class SpeechcastError(Exception):
    """Base class for application errors."""


class ConfigurationError(SpeechcastError):
    """Required configuration is missing or invalid; the server must not start."""


class ContentLoadError(SpeechcastError):
    """The content catalog could not be read and defaults could not be restored."""


class GatewayRejection(SpeechcastError):
    """A request refused by the gateway, rendered as ``{success: false, error}``."""

    def __init__(
        self,
        status_code: int,
        message: str,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.headers = headers
