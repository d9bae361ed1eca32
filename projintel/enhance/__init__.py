"""Optional AI collaborator that refines generated documentation headers."""

from .prompts import MAX_INPUT_CHARS, PromptPair, PromptRenderer, truncate
from .runner import Enhancer, EnhancerRequest, LLMEnhancer
from .salvage import salvage_header

__all__ = [
    "Enhancer",
    "EnhancerRequest",
    "LLMEnhancer",
    "MAX_INPUT_CHARS",
    "PromptPair",
    "PromptRenderer",
    "salvage_header",
    "truncate",
]
