from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import logging

from logic.grid import grid_dimensions, is_completed
from logic.render import render_board


logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """Raised by the persistence layer when a write or read fails."""


@dataclass
class Cell:
    id: Any
    text: str
    marked: bool = False


@dataclass
class Board:
    channel: str
    id: Any = None
    # position (1-based, row-major) -> Cell
    cells: Dict[int, Cell] = field(default_factory=dict)
    repository: Optional[Any] = field(default=None, repr=False, compare=False)
    grid_size: int = field(default=4, init=False)
    line_length: int = field(default=2, init=False)

    def __post_init__(self) -> None:
        self._update_grid_size()

    @staticmethod
    def new(channel: str, board_id: Any = None, repository: Any = None) -> 'Board':
        return Board(channel=channel, id=board_id, repository=repository)

    @staticmethod
    def load(board_id: Any, channel: str, cells: Dict[int, Cell], repository: Any) -> 'Board':
        """Rebuild a board from persisted cells.

        Cells are re-keyed ``1..n`` in position order so that gaps left by
        storage never reach the engine.
        """
        ordered = [cells[pos] for pos in sorted(cells)]
        board = Board(channel=channel, id=board_id, repository=repository)
        board.cells = dict(enumerate(ordered, start=1))
        board._update_grid_size()
        return board

    def add_cell(self, text: str) -> int:
        position = len(self.cells) + 1
        cell_id = self._require_repository().add_cell(self.id, text, position)
        self.cells[position] = Cell(id=cell_id, text=text)
        self._update_grid_size()
        return position

    def remove_cell(self, position: int) -> bool:
        cell = self.cells.get(position)
        if cell is None:
            return False
        try:
            self._require_repository().remove_cell(self.id, position, cell.id)
        except StorageError:
            logger.warning("Failed to remove cell %s from board %s", position, self.id)
            return False

        remaining = [self.cells[pos] for pos in sorted(self.cells) if pos != position]
        self.cells = dict(enumerate(remaining, start=1))
        self._update_grid_size()
        return True

    def switch_cells(self, first: int, second: int) -> bool:
        cell1 = self.cells.get(first)
        cell2 = self.cells.get(second)
        if cell1 is None or cell2 is None:
            return False

        self.cells[first] = cell2
        self.cells[second] = cell1

        # the swap above is kept even if persisting it fails
        try:
            repository = self._require_repository()
            repository.update_cell(cell1.id, second, cell1.marked)
            repository.update_cell(cell2.id, first, cell2.marked)
        except StorageError:
            logger.warning(
                "Failed to persist switch of cells %s and %s on board %s",
                first, second, self.id,
            )
            return False
        return True

    def mark_cell(self, position: int) -> bool:
        cell = self.cells.get(position)
        if cell is None:
            return False

        cell.marked = True
        try:
            self._require_repository().update_cell(cell.id, position, True)
        except StorageError:
            logger.warning("Failed to persist mark of cell %s on board %s", position, self.id)
            return False
        return True

    def is_completed(self) -> bool:
        return is_completed(self.cells, self.line_length)

    def reset(self) -> bool:
        for cell in self.cells.values():
            cell.marked = False
        try:
            self._require_repository().reset_board(self.id)
        except StorageError:
            logger.warning("Failed to reset board %s", self.id)
            return False
        return True

    def to_string(self) -> str:
        return render_board(self.cells)

    def __str__(self) -> str:
        return self.to_string()

    def _require_repository(self) -> Any:
        if self.repository is None:
            raise StorageError("board is not persisted")
        return self.repository

    def _update_grid_size(self) -> None:
        self.grid_size, self.line_length = grid_dimensions(len(self.cells))
