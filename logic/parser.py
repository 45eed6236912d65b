from __future__ import annotations
import re
from typing import List, Optional


SEPARATORS = re.compile(r"[\s,]+")
DIGITS = re.compile(r"[0-9]+")


def normalize(text: str) -> str:
    text = text.strip()
    if text.startswith("#"):
        text = text[1:]
    return text


def parse_position(text: str) -> Optional[int]:
    """Parse a user supplied cell number like ``3`` or ``#3``."""
    text = normalize(text)
    if not DIGITS.fullmatch(text):
        return None
    position = int(text)
    if position < 1:
        return None
    return position


def parse_positions(text: str, count: int) -> Optional[List[int]]:
    """Parse exactly ``count`` positions separated by spaces or commas."""
    parts = [part for part in SEPARATORS.split(text.strip()) if part]
    if len(parts) != count:
        return None
    positions = [parse_position(part) for part in parts]
    if any(pos is None for pos in positions):
        return None
    return positions  # type: ignore[return-value]
