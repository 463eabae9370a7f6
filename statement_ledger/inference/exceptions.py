class InferenceError(Exception):
    """Raised when statement analysis by the AI provider fails."""


class InferenceValidationError(InferenceError):
    """Raised when the provider's JSON does not match the expected statement shape."""


class InferenceNetworkError(InferenceError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""


class InferenceBlockedError(InferenceError):
    """Raised when the provider refuses to answer under its safety policy."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"AI provider blocked the response: {reason}")
        self.reason = reason
