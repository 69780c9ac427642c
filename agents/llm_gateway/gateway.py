"""LLM gateway for embeddings and text completion."""

import logging
from typing import List, Optional

from anthropic import Anthropic
from langfuse import observe
from openai import OpenAI

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """Raised when the model returns no usable content."""


class LLMGateway:
    """Thin wrapper around the model providers.

    Embeddings always come from OpenAI. Completions come from OpenAI by
    default, or from Anthropic when ``provider="anthropic"``.
    """

    def __init__(
        self,
        openai_api_key: Optional[str],
        chat_model: str = "gpt-4o",
        embedding_model: str = "text-embedding-3-small",
        max_tokens: int = 1000,
        provider: str = "openai",
        anthropic_api_key: Optional[str] = None,
        anthropic_model: Optional[str] = None,
        anthropic_max_tokens: int = 1000
    ):
        """Initialize the gateway.

        Args:
            openai_api_key: OpenAI API key
            chat_model: OpenAI chat model for completions
            embedding_model: OpenAI embedding model
            max_tokens: Maximum tokens for OpenAI completions
            provider: "openai" or "anthropic"
            anthropic_api_key: Anthropic API key (anthropic provider only)
            anthropic_model: Anthropic model (anthropic provider only)
            anthropic_max_tokens: Maximum tokens for Anthropic completions
        """
        if provider not in ("openai", "anthropic"):
            raise ValueError(f"Unsupported LLM provider: {provider}")

        self.client = OpenAI(api_key=openai_api_key)
        self.chat_model = chat_model
        self.embedding_model = embedding_model
        self.max_tokens = max_tokens
        self.provider = provider

        self.anthropic_client = None
        self.anthropic_model = anthropic_model
        self.anthropic_max_tokens = anthropic_max_tokens
        if provider == "anthropic":
            if not anthropic_model:
                raise ValueError("anthropic_model is required for the anthropic provider")
            self.anthropic_client = Anthropic(api_key=anthropic_api_key)

        logger.info(f"LLMGateway initialized (provider={provider}, embeddings={embedding_model})")

    @observe(name="embed")
    def embed(self, text: str) -> List[float]:
        """Convert text to an embedding vector.

        Raises:
            GenerationError: If no embedding is returned
        """
        logger.info(f"Embedding text: {text[:100]}...")

        response = self.client.embeddings.create(
            model=self.embedding_model,
            input=text
        )

        embedding = response.data[0].embedding if response.data else None
        if not embedding:
            raise GenerationError("No embedding returned from OpenAI")

        return list(embedding)

    @observe(name="complete")
    def complete(self, prompt: str, system: Optional[str] = None) -> str:
        """Send a single prompt and return the model's text reply.

        Raises:
            GenerationError: If the reply is absent or empty
        """
        if self.provider == "anthropic":
            text = self._complete_anthropic(prompt, system)
        else:
            text = self._complete_openai(prompt, system)

        if not text or not text.strip():
            raise GenerationError(f"No response from {self.provider}")

        return text

    def _complete_openai(self, prompt: str, system: Optional[str]) -> Optional[str]:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        response = self.client.chat.completions.create(     # type: ignore[call-overload]
            model=self.chat_model,
            messages=messages,
            max_tokens=self.max_tokens,
            temperature=0.0,
        )

        if not response.choices:
            return None
        return response.choices[0].message.content

    def _complete_anthropic(self, prompt: str, system: Optional[str]) -> Optional[str]:
        kwargs = {
            "model": self.anthropic_model,
            "max_tokens": self.anthropic_max_tokens,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": 0.0,
        }
        if system:
            kwargs["system"] = system

        response = self.anthropic_client.messages.create(**kwargs)

        parts = [block.text for block in response.content if getattr(block, "text", None)]
        return "".join(parts) if parts else None
