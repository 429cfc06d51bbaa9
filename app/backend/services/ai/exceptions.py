"""
Shared exceptions for AI service modules.
"""

# Handle both package imports and standalone imports
try:
    from ...models import Provider, ProviderAttemptError
except ImportError:
    from models import Provider, ProviderAttemptError


class AIServiceError(Exception):
    """Raised when AI service operations fail."""

    pass


class ProviderError(AIServiceError):
    """Raised when a single provider call fails (network, auth, quota, bad output)."""

    def __init__(self, provider: Provider, message: str):
        self.provider = provider
        self.message = message
        super().__init__(f"{provider.value}: {message}")


class ExtractionExhaustedError(AIServiceError):
    """Raised when every planned provider attempt failed."""

    def __init__(self, errors: list[ProviderAttemptError]):
        self.errors = list(errors)
        reason = " | ".join(str(error) for error in self.errors)
        super().__init__(f"Failed to extract data using AI ({reason})")
