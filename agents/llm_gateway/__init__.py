"""LLM Gateway - embeddings and completions behind one boundary."""

from .gateway import LLMGateway, GenerationError

__all__ = ["LLMGateway", "GenerationError"]
