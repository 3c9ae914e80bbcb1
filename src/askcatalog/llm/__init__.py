"""Language model clients for SQL generation.

Example:
    >>> from askcatalog.llm import get_client
    >>>
    >>> client = get_client("openai", model="gpt-4o-mini")
    >>> # Gemini through its OpenAI-compatible endpoint
    >>> client = get_client(
    ...     "openai",
    ...     model="gemini-2.5-flash",
    ...     base_url="https://generativelanguage.googleapis.com/v1beta/openai/",
    ...     api_key="...",
    ... )
"""

from askcatalog.llm.provider import LanguageModelClient, SamplingConfig

__all__ = [
    "LanguageModelClient",
    "SamplingConfig",
    "get_client",
]


def get_client(
    provider: str | LanguageModelClient = "openai",
    **kwargs: object,
) -> LanguageModelClient:
    """Get a language model client by name or return the client if already instantiated.

    Args:
        provider: Provider name ("openai") or LanguageModelClient instance.
        **kwargs: Additional arguments passed to the client constructor.

    Returns:
        LanguageModelClient instance.

    Raises:
        ValueError: If provider name is unknown.
    """
    if isinstance(provider, LanguageModelClient):
        return provider

    if provider == "openai":
        from askcatalog.llm.openai import OpenAIClient

        return OpenAIClient(**kwargs)  # type: ignore[arg-type]
    else:
        raise ValueError(f"Unknown language model provider: {provider}. Available: 'openai'")
