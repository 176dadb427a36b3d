"""Bundle-Engine exception hierarchy.

The entitlement parser and progress calculator never raise; these errors
belong to the subscription lifecycle and the HTTP layer around it.
"""


class BundleEngineError(Exception):
    """Base exception for all Bundle-Engine errors."""

    def __init__(self, message: str = "", code: str = "BUNDLE_ENGINE_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class SubscriptionStateError(BundleEngineError):
    """Raised when a subscription cannot move to the requested status."""

    def __init__(self, message: str = "Invalid subscription transition"):
        super().__init__(message, code="INVALID_TRANSITION")


class SessionStateError(BundleEngineError):
    """Raised when a training session cannot move to the requested status."""

    def __init__(self, message: str = "Invalid session transition"):
        super().__init__(message, code="INVALID_TRANSITION")


class SubscriptionMismatchError(BundleEngineError):
    """Raised when a session is applied to a subscription it is not linked to."""

    def __init__(self, message: str = "Session does not belong to this subscription"):
        super().__init__(message, code="SUBSCRIPTION_MISMATCH")
