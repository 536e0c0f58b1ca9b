"""
Formatting utilities for upload log lines.

Byte sizes are rendered in binary units (KiB, MiB, ...).
"""

from typing import Optional

BYTES_PER_KIB = 1024
BYTES_PER_MIB = 1024**2


def format_bytes(num_bytes: Optional[int], decimal_places: int = 2) -> str:
    """
    Format byte count as human-readable string with binary units.

    Args:
        num_bytes: Number of bytes to format (None returns "n/a")
        decimal_places: Number of decimal places to display (default: 2)

    Returns:
        Formatted string like "1.23 MiB"

    Examples:
        >>> format_bytes(1024)
        '1.00 KiB'
        >>> format_bytes(0)
        '0 B'
        >>> format_bytes(None)
        'n/a'
    """
    if num_bytes is None:
        return "n/a"
    if num_bytes < BYTES_PER_KIB:
        return f"{num_bytes} B"

    units = ["B", "KiB", "MiB", "GiB", "TiB", "PiB"]
    value = float(num_bytes)
    for unit in units:
        if value < BYTES_PER_KIB or unit == units[-1]:
            return f"{value:.{decimal_places}f} {unit}"
        value /= BYTES_PER_KIB
    return f"{value:.{decimal_places}f} PiB"
