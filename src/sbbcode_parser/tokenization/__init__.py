"""Tokenization engine for SBBCode parsing.

This module converts markup text into tokens using a strict state machine
that switches between content and tag lexing modes.

Key Components:
    SBBCodeTokenizer: Main tokenization class
    Token: Represents individual tokens with position information
    TokenType: Enumeration of all token types
    TokenPosition: Position tracking for error reporting
    TokenizerState: State machine states for tokenization processing
"""

from .tokenizer import (
    SBBCodeTokenizer,
    Token,
    TokenizationResult,
    TokenizerState,
    TokenPosition,
    TokenType,
)

__all__ = [
    "SBBCodeTokenizer",
    "Token",
    "TokenPosition",
    "TokenType",
    "TokenizationResult",
    "TokenizerState",
]
