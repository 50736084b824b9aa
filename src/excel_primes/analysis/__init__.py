"""Numeric analysis of cell text for Excel Prime Finder."""

from .prime_checker import is_integer_literal, is_prime, is_prime_literal

__all__ = ["is_integer_literal", "is_prime", "is_prime_literal"]
