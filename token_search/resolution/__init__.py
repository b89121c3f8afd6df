"""Token resolution module - resolves user input to token descriptors."""

from .token_resolver import TokenResolver, matches_query

__all__ = ["TokenResolver", "matches_query"]
