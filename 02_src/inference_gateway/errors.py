"""
Exceptions raised by Inference Gateway.
"""


class InferenceGatewayError(Exception):
    """Base class for gateway errors."""


class InvalidInput(InferenceGatewayError, ValueError):
    """Raised when a chat message is empty or whitespace only."""

    def __init__(self, details: str = "message must not be empty"):
        self.details = details
        super().__init__(f"Invalid input: {details}")


class BackendUnavailable(InferenceGatewayError):
    """
    Raised when the generation backend fails or times out.

    InferenceRouter catches it and answers with a fallback result,
    so callers never see it.
    """

    def __init__(self, model: str, details: str):
        self.model = model
        self.details = details
        super().__init__(f"Backend unavailable for {model}: {details}")
