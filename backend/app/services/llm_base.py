"""
Kavin's Catalog Backend — Abstract LLM Service Interface
==========================================================

What:  Abstract base class defining the contract for AI product copywriting.
How:   Concrete implementations inherit from LLMService and implement
       generate_product_description(). The product form service only talks
       to this interface, so tests swap in a mock and a different provider
       can replace Gemini without touching callers.
"""

from abc import ABC, abstractmethod

from app.schemas.product import DescriptionRequest


class LLMService(ABC):
    """
    Abstract interface for AI-generated product descriptions.

    Contract:
        - generate_product_description() returns plain text, never None
        - Implementations handle their own retry logic and error translation
        - Provider-specific errors are wrapped in LLMServiceError
    """

    @abstractmethod
    async def generate_product_description(self, request: DescriptionRequest) -> str:
        """
        Write a short sales description for a catalog product.

        Args:
            request: Name, reference, color names, category and fabric.

        Returns:
            The description text. Implementations return a fixed
            "unavailable" sentence when the model answers with nothing.

        Raises:
            LLMServiceError: When the AI service fails after all retries.
            CircuitBreakerOpenError: When recent failures opened the circuit.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Lightweight reachability check; must not consume generation quota."""
        ...
