"""Display formatting shared by list derivation, the CLI and the GUI."""

from __future__ import annotations

from datetime import datetime

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def format_display_date(dt: datetime) -> str:
    """
    Format a timestamp the way list rows show it, e.g. ``"Jan 2, 2024"``.

    Aware timestamps are shown in local time; naive ones are used as given.
    The day is not zero padded. The month abbreviation is always English so the
    text searched by list filtering is stable across locales.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone()
    return f"{_MONTHS[dt.month - 1]} {dt.day}, {dt.year}"


def format_file_size(size: int) -> str:
    """
    Render a byte count with a binary unit, e.g. ``1536 -> "1.5 KB"``.

    Values are rounded to two decimals with trailing zeros dropped. Sizes beyond
    the largest unit stay in GB.
    """
    if size <= 0:
        return "0 Bytes"
    exponent = 0
    while exponent < len(_SIZE_UNITS) - 1 and size >= 1024 ** (exponent + 1):
        exponent += 1
    value = round(size / (1024**exponent), 2)
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[exponent]}"


def name_initials(name: str) -> str:
    """
    Return upper-cased initials for an avatar badge.

    A single word yields its first letter; several words yield the first letters
    of the first and last word. Blank names yield ``"?"``.
    """
    parts = name.split()
    if not parts:
        return "?"
    if len(parts) == 1:
        return parts[0][0].upper()
    return (parts[0][0] + parts[-1][0]).upper()
