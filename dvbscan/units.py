"""
Frequency Units and Number Formatting

Frequencies and symbol rates are stored in whatever unit their origin used:
a channels.conf entry carries MHz for satellites but kHz or Hz for cable and
terrestrial, scan tables may carry kHz. The helpers here fold such values
onto a common scale the same way the channel printer and the satellite IF
check expect them.
"""

from typing import Union


def int_to_str(n: int, digits: int = 1) -> str:
    """
    Format an integer, zero padded to `digits` characters.

    The minus sign of a negative number takes one of the padding positions.

    Example:
        >>> int_to_str(7, 3)
        '007'
        >>> int_to_str(-7, 3)
        '-07'
    """
    if n < 0:
        return '-' + str(-n).zfill(max(digits - 1, 0))
    return str(n).zfill(digits)


def to_hex(n: int, digits: int = 2) -> str:
    """Uppercase hexadecimal, zero padded to `digits` characters."""
    return f"{n:0{digits}X}"


def int_to_hex(n: int, digits: int = 2) -> str:
    """Hexadecimal with '0x' prefix, e.g. 0x53."""
    return "0x" + to_hex(n, digits)


def float_to_str(f: float, width: int = 8, precision: int = 2) -> str:
    """Fixed point, right aligned in a field of `width` characters."""
    return f"{f:{width}.{precision}f}"


def normalize_frequency(value: int) -> int:
    """
    Fold a frequency or symbol rate of unknown unit onto the kHz/MHz scale.

    Values below 1000 are taken as one unit too coarse and multiplied by
    1000, values above 999999 as one unit too fine and divided by 1000.
    Everything in between is left alone.

    Args:
        value: Raw stored value

    Returns:
        Normalized integer value
    """
    if value < 1000:
        value *= 1000
    if value > 999999:
        value //= 1000
    return value


def reduce_to_mhz(frequency: Union[int, float]) -> int:
    """
    Divide by 1000 until the value is at most 999999.

    Hz and kHz satellite frequencies both end up in MHz.
    """
    f = int(frequency)
    while f > 999999:
        f //= 1000
    return f
