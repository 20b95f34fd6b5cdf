"""Text utilities."""

from .cleaning import clean_fragment, collapse_whitespace, strip_markup

__all__ = [
    "clean_fragment",
    "collapse_whitespace",
    "strip_markup",
]
