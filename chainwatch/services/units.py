"""Integer/decimal conversions for on-chain amounts."""

from __future__ import annotations

from typing import Any, Optional


def format_units(value: int, decimals: int) -> str:
    """Render a raw integer amount with ``decimals`` places, trailing zeros trimmed."""

    negative = value < 0
    whole, fraction = divmod(abs(int(value)), 10 ** decimals) if decimals else (abs(int(value)), 0)
    text = str(whole)
    if fraction:
        text = f"{whole}.{str(fraction).rjust(decimals, '0').rstrip('0')}"
    return f"-{text}" if negative else text


def parse_hex_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    """Parse a JSON-RPC quantity ("0x1a") or plain integer."""

    if value is None:
        return default
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text:
        return default
    try:
        return int(text, 16) if text.lower().startswith("0x") else int(text)
    except ValueError:
        return default


def to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


__all__ = ["format_units", "parse_hex_int", "to_float"]
