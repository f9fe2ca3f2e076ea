"""Checked fixed-width unsigned arithmetic.

Python integers never wrap, so the width is enforced explicitly: any result
outside ``[0, 2**bits - 1]`` raises ``ArithmeticOverflowError`` instead of
being truncated.
"""

from .errors import ArithmeticOverflowError


class CheckedUint:
    """Unsigned integer arithmetic bounded to ``bits`` bits."""

    def __init__(self, bits: int = 256):
        if bits <= 0:
            raise ValueError("bits must be positive")
        self.bits = bits
        self.max_value = 2 ** bits - 1

    def require(self, value: int, name: str = "value") -> int:
        """Return ``value`` if it is an in-range unsigned integer."""
        if isinstance(value, bool) or not isinstance(value, int):
            raise ArithmeticOverflowError(f"{name} must be an integer", type(value).__name__)
        if value < 0 or value > self.max_value:
            raise ArithmeticOverflowError(f"{name} out of uint{self.bits} range", value)
        return value

    def add(self, a: int, b: int) -> int:
        result = a + b
        if result > self.max_value:
            raise ArithmeticOverflowError(f"uint{self.bits} addition overflow", (a, b))
        return result

    def mul(self, a: int, b: int) -> int:
        result = a * b
        if result > self.max_value:
            raise ArithmeticOverflowError(f"uint{self.bits} multiplication overflow", (a, b))
        return result

    def div(self, a: int, b: int) -> int:
        """Truncating division; division by zero is rejected."""
        if b == 0:
            raise ArithmeticOverflowError("division by zero", a)
        return a // b

    def largest_multiple(self, of: int) -> int:
        """Largest multiple of ``of`` that fits the width."""
        if of <= 0:
            raise ArithmeticOverflowError("divisor must be positive", of)
        return self.max_value - (self.max_value % of)
