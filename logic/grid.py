from __future__ import annotations
from typing import Mapping, Tuple


# (max cell count, grid size, line length); larger boards stay 5×5
SIZE_STEPS = (
    (1, 1, 1),
    (4, 4, 2),
    (9, 9, 3),
    (16, 16, 4),
)
MAX_GRID = (25, 5)


def grid_dimensions(count: int) -> Tuple[int, int]:
    """Return ``(grid_size, line_length)`` for a board holding ``count`` cells.

    This is a step function rather than a true square root: an empty board
    falls into the 2×2 tier and anything above 16 cells is capped at 5×5.
    """
    if count == 1:
        return 1, 1
    for limit, size, line in SIZE_STEPS[1:]:
        if count <= limit:
            return size, line
    return MAX_GRID


def position_of(row: int, col: int, line_length: int) -> int:
    """Map 1-based ``(row, col)`` to a 1-based row-major position."""
    return (row - 1) * line_length + col


def is_completed(cells: Mapping[int, object], line_length: int) -> bool:
    """Return ``True`` when a full row, column or diagonal is marked.

    Only positions ``1..line_length**2`` are visited, so extra cells on a
    capped board never count.  Missing positions are treated as unmarked.
    """
    columns = [0] * line_length
    main_diagonal = 0
    anti_diagonal = 0

    for row in range(1, line_length + 1):
        in_row = 0
        for col in range(1, line_length + 1):
            cell = cells.get(position_of(row, col, line_length))
            if cell is None or not cell.marked:
                continue

            in_row += 1
            columns[col - 1] += 1
            if row == col:
                main_diagonal += 1
            if row + col == line_length + 1:
                anti_diagonal += 1

            if line_length in (in_row, columns[col - 1], main_diagonal, anti_diagonal):
                return True

    return False
