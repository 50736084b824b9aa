"""Integer literal validation and primality testing.

Only plain ASCII digit strings are considered numbers here: no sign, no
decimal point, no thousands separators and no surrounding whitespace.
Primality is delegated to sympy, which is deterministic for every value
below 2**64 and has no practical upper bound on Python integers.
"""

from sympy import isprime

DIGITS = frozenset("0123456789")


def is_integer_literal(value: str) -> bool:
    """Check whether every character of value is a decimal digit 0-9.

    An empty string passes vacuously; callers that parse the value must
    guard against it.

    Args:
        value: Candidate string

    Returns:
        True if value consists only of ASCII digits
    """
    return all(char in DIGITS for char in value)


def is_prime(number: int) -> bool:
    """Return True if number is prime. 0, 1 and negatives are not."""
    return bool(isprime(number))


def is_prime_literal(value: str) -> bool:
    """Check whether value is a non-empty digit string denoting a prime.

    The digit check runs first so that non-numeric strings are never parsed.

    Args:
        value: Raw cell text

    Returns:
        True if value is an integer literal whose value is prime
    """
    if not value or not is_integer_literal(value):
        return False

    return is_prime(int(value, 10))
