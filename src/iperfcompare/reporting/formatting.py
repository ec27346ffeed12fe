"""
Display formatting for summary values.

Absent values render as 'N/A' so "no such metric" never reads as zero.
"""

NOT_AVAILABLE = "N/A"

_BYTE_UNITS = ("Bytes", "KB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB")


def _compact(value: float) -> float | int:
    """Drop a trailing .0 so whole numbers print as integers."""
    return int(value) if float(value).is_integer() else value


def format_throughput(bits_per_second: float | None) -> str:
    """Bits/s as 'x.xx Mbps'."""
    if bits_per_second is None:
        return NOT_AVAILABLE
    return f"{_compact(round(bits_per_second / 1_000_000, 2))} Mbps"


def format_ms(value: float | None) -> str:
    """Milliseconds rounded to 2 decimals."""
    if value is None:
        return NOT_AVAILABLE
    return f"{_compact(round(value, 2))} ms"


def format_count(value: int | None) -> str:
    if value is None:
        return NOT_AVAILABLE
    return str(value)


def format_bytes(num_bytes: float | None, decimals: int = 2) -> str:
    """
    Human-readable byte size using 1024-based units.

    Args:
        num_bytes: Size in bytes.
        decimals: Digits after the decimal point.

    Returns:
        String such as '1.5 MB'. None renders as N/A, zero as '0 Bytes'.
    """
    if num_bytes is None:
        return NOT_AVAILABLE
    if num_bytes <= 0:
        return "0 Bytes"
    exponent = 0
    while num_bytes >= 1024 ** (exponent + 1) and exponent < len(_BYTE_UNITS) - 1:
        exponent += 1
    scaled = round(num_bytes / 1024**exponent, max(decimals, 0))
    return f"{_compact(scaled)} {_BYTE_UNITS[exponent]}"


def format_duration(seconds: float) -> str:
    return f"{_compact(seconds)}s"
