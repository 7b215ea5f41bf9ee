"""Client-visible errors raised by the chat endpoint.

Each error carries the HTTP status and the message rendered as
``{"error": message}``. Upstream lookup failures are not errors at this
level; they travel as ``WeatherResult`` variants (see models.py).
"""


class ChatError(Exception):
    status_code = 500
    message = "Failed to process message"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class BadRequest(ChatError):
    status_code = 400
    message = "Message is required"


class Misconfigured(ChatError):
    """The model credential is missing; the message names the provider."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)


class ChatFailure(ChatError):
    """Any failure while handling the chat turn, cause hidden from the client."""

    status_code = 500
    message = "Failed to process message"
