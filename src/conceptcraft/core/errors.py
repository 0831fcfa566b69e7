"""Exception hierarchy for Conceptcraft.

Backend errors (``RelayError`` and subclasses) are raised by the relay client
and converted to ``{"error": message}`` bodies at the endpoint boundary.
Wizard errors carry a message intended to be displayed directly to the user.
"""


class ConceptcraftError(Exception):
    """Base class for all Conceptcraft errors."""


class RelayError(ConceptcraftError):
    """A relay call to the upstream provider could not be completed."""


class ConfigurationError(RelayError):
    """The upstream credential is missing."""


class UpstreamError(RelayError):
    """The upstream provider answered with an error or an unusable body.

    Attributes:
        status_code: HTTP status returned by the provider.
        body: Raw response text.
    """

    def __init__(self, status_code: int, body: str, message: str | None = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message or f"OpenRouter API error: {status_code} - {body}")


class NetworkError(ConceptcraftError):
    """The wizard could not get a successful response from the HTTP API."""


class WizardError(ConceptcraftError):
    """User-friendly wizard error.

    Raised when a transition guard fails or a relay call made during a
    transition is rejected.  The message is shown as a notification.
    """


class UnsupportedImageError(WizardError):
    """An uploaded file is not a JPEG, PNG or WebP image."""
