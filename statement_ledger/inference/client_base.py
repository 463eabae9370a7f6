from abc import ABC, abstractmethod

from statement_ledger.extraction.models import PayloadPart


class BaseInferenceClient(ABC):
    """Contract for provider-specific inference clients."""

    @abstractmethod
    async def create_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        parts: list[PayloadPart],
    ) -> str:
        """Send the parts as one user message and return the reply text.

        Raises:
            InferenceNetworkError: on transport or API failure.
            InferenceBlockedError: when the provider refuses to answer.
            InferenceError: when the reply carries no content.
        """
