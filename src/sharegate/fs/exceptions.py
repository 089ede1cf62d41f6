"""Custom exception hierarchy for the sharegate access layer.

The core checks (``access`` and ``path_safety``) never raise for expected
outcomes.  These exceptions cover caller contract violations and the
controller-facing ``AccessGate.require`` helper.
"""


class ShareGateError(Exception):
    """Base exception for all sharegate errors."""


class ConfigurationError(ShareGateError):
    """Raised when required configuration is missing or malformed."""


class AccessDeniedError(ShareGateError):
    """Raised by ``AccessGate.require`` when a request is denied.

    The message is always generic so that a denial cannot be told apart
    from a missing resource.
    """

    status_code = 403

    def __init__(self, message: str = "Not found or access denied") -> None:
        super().__init__(message)
        self.message = message
