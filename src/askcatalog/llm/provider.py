"""Language model client interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class SamplingConfig:
    """Sampling parameters requested from the model.

    Near-zero temperature favors repeatable SQL over creative SQL, and the
    output cap bounds the size of a single statement.
    """

    temperature: float = 0.0
    max_output_tokens: int = 500


class LanguageModelClient(ABC):
    """Interface for language model providers.

    Implementations return the generated text, or raise
    :class:`~askcatalog.exceptions.GenerationError` for provider, network and
    timeout failures and for empty output.
    """

    @abstractmethod
    async def generate(
        self,
        system_instruction: str,
        user_content: str,
        sampling: SamplingConfig,
    ) -> str:
        """Generate text for one request.

        Args:
            system_instruction: Fixed instruction (schema and rules).
            user_content: The user's question.
            sampling: Temperature and output-length cap.

        Returns:
            The model's raw text output.
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Model identifier, used in logs."""
        ...

    async def aclose(self) -> None:
        """Release network resources held by the client."""
        return None
