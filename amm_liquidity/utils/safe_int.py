"""Checked uint256 arithmetic for on-chain token amounts.

Every pool contract computes with 256-bit unsigned integers and reverts on
overflow. SafeUint mirrors that: each operation validates its result, so a
plan computed off-chain fails the same way the contract would instead of
silently producing a number the chain can't represent.

Usage pattern:
    from amm_liquidity.utils.safe_int import S

    def price(amount_in, reserve_in, reserve_out):
        a, ri, ro = S(amount_in), S(reserve_in), S(reserve_out)
        return (a * 997 * ro // (ri * 1000 + a * 997)).value
"""

from __future__ import annotations

from ..core.exceptions import ArithmeticOverflowError

UINT256_MAX = 2**256 - 1


class Uint256Overflow(ArithmeticOverflowError):
    """Value exceeds uint256 maximum."""

    pass


class Underflow(ArithmeticOverflowError):
    """Subtraction would produce negative result."""

    pass


class DivisionByZero(ArithmeticOverflowError):
    """Division by zero."""

    pass


def _extract_value(other: SafeUint | int) -> int:
    if isinstance(other, SafeUint):
        return other._value
    if isinstance(other, bool) or not isinstance(other, int):
        raise TypeError(f"SafeUint operand must be int, got {type(other).__name__}")
    return other


class SafeUint:
    """Unsigned integer whose arithmetic stays inside [0, 2^256 - 1].

    - Results above UINT256_MAX raise Uint256Overflow
    - Negative results from subtraction raise Underflow
    - Division by zero raises DivisionByZero
    - Division floors, as the EVM does

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeUint) -> None:
        if isinstance(value, SafeUint):
            value = value._value
        elif isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"SafeUint requires int, got {type(value).__name__}")
        self._value = _checked(value)

    @property
    def value(self) -> int:
        """The underlying integer value."""
        return self._value

    def __repr__(self) -> str:
        return f"SafeUint({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    def __hash__(self) -> int:
        return hash(self._value)

    # --- Arithmetic operations ---

    def __add__(self, other: SafeUint | int) -> SafeUint:
        return SafeUint(self._value + _extract_value(other))

    def __radd__(self, other: int) -> SafeUint:
        return SafeUint(_extract_value(other) + self._value)

    def __sub__(self, other: SafeUint | int) -> SafeUint:
        other_val = _extract_value(other)
        result = self._value - other_val
        if result < 0:
            raise Underflow(f"Underflow: {self._value} - {other_val}")
        return SafeUint(result)

    def __rsub__(self, other: int) -> SafeUint:
        other_val = _extract_value(other)
        result = other_val - self._value
        if result < 0:
            raise Underflow(f"Underflow: {other_val} - {self._value}")
        return SafeUint(result)

    def __mul__(self, other: SafeUint | int) -> SafeUint:
        return SafeUint(self._value * _extract_value(other))

    def __rmul__(self, other: int) -> SafeUint:
        return SafeUint(_extract_value(other) * self._value)

    def __floordiv__(self, other: SafeUint | int) -> SafeUint:
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Division by zero: {self._value} // 0")
        return SafeUint(self._value // other_val)

    def __rfloordiv__(self, other: int) -> SafeUint:
        other_val = _extract_value(other)
        if self._value == 0:
            raise DivisionByZero(f"Division by zero: {other_val} // 0")
        return SafeUint(other_val // self._value)

    # --- Comparison operations ---

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeUint):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return NotImplemented
        return not result

    def __lt__(self, other: SafeUint | int) -> bool:
        return self._value < _extract_value(other)

    def __le__(self, other: SafeUint | int) -> bool:
        return self._value <= _extract_value(other)

    def __gt__(self, other: SafeUint | int) -> bool:
        return self._value > _extract_value(other)

    def __ge__(self, other: SafeUint | int) -> bool:
        return self._value >= _extract_value(other)

    # --- Conversion ---

    def __int__(self) -> int:
        return self._value

    def __index__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        return self._value != 0

    def min(self, other: SafeUint | int) -> SafeUint:
        """Return minimum of self and other."""
        return SafeUint(min(self._value, _extract_value(other)))


def _checked(value: int) -> int:
    if value < 0:
        raise Underflow(f"Negative value cannot be uint256: {value}")
    if value > UINT256_MAX:
        raise Uint256Overflow(f"Value exceeds uint256 max: {value}")
    return value


def S(value: int | SafeUint) -> SafeUint:
    """Shorthand constructor for SafeUint."""
    return SafeUint(value)
