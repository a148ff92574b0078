"""Public parsing API for SBBCode."""

from .parser import SBBCodeParser, parse, try_parse

__all__ = [
    "SBBCodeParser",
    "parse",
    "try_parse",
]
