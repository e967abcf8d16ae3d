"""Range checks for integer values stored in bit fields."""

from __future__ import annotations

__all__ = ["check_signed_fits", "check_unsigned_fits"]


def check_signed_fits(value: int, bits: int) -> int:
    """Return ``value`` if it fits in a signed field of ``bits`` bits.

    Raises ``ValueError`` for a non-positive width and ``OverflowError``
    when the value lies outside the two's complement range.
    """
    if bits <= 0:
        raise ValueError("bit width must be positive")
    limit = 1 << (bits - 1)
    if not -limit <= value <= limit - 1:
        raise OverflowError("bitfield overflow")
    return value


def check_unsigned_fits(value: int, bits: int) -> int:
    """Return ``value`` if it fits in an unsigned field of ``bits`` bits.

    Raises ``ValueError`` for a negative width and ``OverflowError`` when
    the value is negative or exceeds ``2**bits - 1``.
    """
    if bits < 0:
        raise ValueError("bit width must not be negative")
    if value < 0 or value > (1 << bits) - 1:
        raise OverflowError("bitfield overflow")
    return value