from models import Board, Cell, StorageError


class FakeRepository:
    """In-memory stand-in for the ``storage`` module.

    Set ``fail`` to the name of an operation to make it raise
    :class:`StorageError`.
    """

    def __init__(self, fail=None, fail_on_call=None):
        self.fail = set([fail] if isinstance(fail, str) else fail or [])
        # operation name -> 1-based call number that raises
        self.fail_on_call = dict(fail_on_call or {})
        self.calls = []
        self._next_id = 0

    def _record(self, name, *args):
        self.calls.append((name, *args))
        count = sum(1 for call in self.calls if call[0] == name)
        if name in self.fail or self.fail_on_call.get(name) == count:
            raise StorageError(f"{name} failed")

    def add_cell(self, board_id, text, position):
        self._record("add_cell", board_id, text, position)
        self._next_id += 1
        return f"c{self._next_id}"

    def remove_cell(self, board_id, position, cell_id):
        self._record("remove_cell", board_id, position, cell_id)

    def update_cell(self, cell_id, position, marked):
        self._record("update_cell", cell_id, position, marked)

    def reset_board(self, board_id):
        self._record("reset_board", board_id)


def make_board(count, marked=(), repository=None):
    cells = {
        pos: Cell(id=f"c{pos}", text=f"item {pos}", marked=pos in marked)
        for pos in range(1, count + 1)
    }
    return Board.load("b1", "chan", cells, repository or FakeRepository())


def texts(board):
    return [board.cells[pos].text for pos in sorted(board.cells)]
