from __future__ import annotations
from typing import Mapping


EMPTY_BOARD_TEXT = "No items added yet"
# appended to the text of marked cells
DONE_SYMBOL = "✅"


def format_cell(position: int, cell) -> str:
    suffix = f" {DONE_SYMBOL}" if cell.marked else ""
    return f"{position}. {cell.text}{suffix}"


def render_board(cells: Mapping[int, object]) -> str:
    """Return the numbered listing of ``cells`` in position order."""
    if not cells:
        return EMPTY_BOARD_TEXT
    return "\n".join(format_cell(pos, cells[pos]) for pos in sorted(cells))
