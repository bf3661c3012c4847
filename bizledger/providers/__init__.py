"""Completion providers used by the AI analysis service."""

from bizledger.providers.mistral import Completion, MistralProvider

__all__ = ["Completion", "MistralProvider"]
