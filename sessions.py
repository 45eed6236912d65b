"""Per-channel board registry used by the chat handlers."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import storage
from models import Board


logger = logging.getLogger(__name__)


class BoardRegistry:
    """Caches one :class:`Board` per chat channel.

    The registry is owned by the bot application (``application.bot_data``)
    and hands out one :class:`asyncio.Lock` per channel.  Handlers must hold
    that lock while mutating a board because the engine itself does no
    locking.

    Boards and locks are kept for the life of the process, one entry per
    chat the bot has seen.  :meth:`close` forgets the board but keeps the
    lock, since callers hold it while closing.
    """

    def __init__(self, repository: Any = storage) -> None:
        self.repository = repository
        self._boards: Dict[str, Board] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def lock(self, channel: str) -> asyncio.Lock:
        return self._locks.setdefault(channel, asyncio.Lock())

    def cached(self, channel: str) -> Optional[Board]:
        return self._boards.get(channel)

    def get(self, channel: str) -> Board:
        board = self._boards.get(channel)
        if board is not None:
            return board

        board_id = self.repository.find_board(channel)
        if board_id is None:
            board_id = self.repository.create_board(channel)
            board = Board.new(channel, board_id, self.repository)
        else:
            cells = self.repository.load_cells(board_id)
            board = Board.load(board_id, channel, cells, self.repository)
        logger.info(
            "Loaded board %s for channel %s with %d cells", board_id, channel, len(board.cells)
        )
        self._boards[channel] = board
        return board

    def discard(self, channel: str) -> None:
        self._boards.pop(channel, None)

    def close(self, channel: str) -> None:
        """Delete the channel's board from storage and forget it."""
        board = self._boards.get(channel)
        board_id = board.id if board is not None else self.repository.find_board(channel)
        if board_id is not None:
            self.repository.delete_board(board_id)
            logger.info("Deleted board %s for channel %s", board_id, channel)
        self.discard(channel)


REGISTRY_KEY = "board_registry"


def registry_from(context) -> BoardRegistry:
    """Return the registry stored in the application's ``bot_data``."""
    bot_data = context.bot_data
    registry = bot_data.get(REGISTRY_KEY)
    if registry is None:
        registry = bot_data[REGISTRY_KEY] = BoardRegistry()
    return registry
