import pytest

from models import Board, Cell, StorageError
from tests.utils import FakeRepository, make_board, texts


def test_new_board_is_empty():
    board = Board.new("chan")
    assert board.channel == "chan"
    assert board.id is None
    assert board.cells == {}
    assert (board.grid_size, board.line_length) == (4, 2)


def test_load_recomputes_size_and_rekeys_positions():
    cells = {
        7: Cell(id="x", text="late"),
        2: Cell(id="y", text="early", marked=True),
    }
    board = Board.load("b1", "chan", cells, FakeRepository())
    assert sorted(board.cells) == [1, 2]
    assert texts(board) == ["early", "late"]
    assert board.cells[1].marked is True
    assert (board.grid_size, board.line_length) == (4, 2)


def test_add_cell_assigns_next_position():
    repo = FakeRepository()
    board = Board.load("b1", "chan", {}, repo)

    assert board.add_cell("first") == 1
    assert board.add_cell("second") == 2
    assert repo.calls == [
        ("add_cell", "b1", "first", 1),
        ("add_cell", "b1", "second", 2),
    ]
    assert board.cells[2] == Cell(id="c2", text="second", marked=False)


def test_add_cell_resizes_board():
    board = make_board(4)
    assert board.line_length == 2
    assert board.add_cell("fifth") == 5
    assert (board.grid_size, board.line_length) == (9, 3)


def test_add_cell_accepts_empty_text():
    board = make_board(0)
    assert board.add_cell("") == 1
    assert board.cells[1].text == ""


def test_add_cell_failure_leaves_board_untouched():
    board = make_board(4, repository=FakeRepository(fail="add_cell"))
    with pytest.raises(StorageError):
        board.add_cell("fifth")
    assert sorted(board.cells) == [1, 2, 3, 4]
    assert board.line_length == 2


def test_remove_missing_position_is_noop():
    repo = FakeRepository()
    board = make_board(3, repository=repo)
    assert board.remove_cell(4) is False
    assert board.remove_cell(0) is False
    assert repo.calls == []
    assert texts(board) == ["item 1", "item 2", "item 3"]


@pytest.mark.parametrize("position", [1, 3, 5])
def test_remove_cell_shifts_later_positions(position):
    repo = FakeRepository()
    board = make_board(5, repository=repo)

    assert board.remove_cell(position) is True

    expected = [f"item {pos}" for pos in range(1, 6) if pos != position]
    assert sorted(board.cells) == [1, 2, 3, 4]
    assert texts(board) == expected
    assert repo.calls == [("remove_cell", "b1", position, f"c{position}")]


def test_remove_cell_keeps_tail_exactly_once():
    board = make_board(5)
    tail = board.cells[5]

    board.remove_cell(2)

    assert 5 not in board.cells
    assert board.cells[4] is tail
    assert list(board.cells.values()).count(tail) == 1


def test_remove_cell_resizes_board():
    board = make_board(5)
    assert board.line_length == 3
    board.remove_cell(1)
    assert (board.grid_size, board.line_length) == (4, 2)
    board.remove_cell(1)
    board.remove_cell(1)
    board.remove_cell(1)
    assert (board.grid_size, board.line_length) == (1, 1)


def test_remove_cell_failure_keeps_cells():
    board = make_board(3, repository=FakeRepository(fail="remove_cell"))
    assert board.remove_cell(2) is False
    assert texts(board) == ["item 1", "item 2", "item 3"]


def test_switch_cells_persists_both_with_own_marks():
    repo = FakeRepository()
    board = make_board(4, marked={1}, repository=repo)

    assert board.switch_cells(1, 4) is True

    assert board.cells[1].text == "item 4"
    assert board.cells[4].text == "item 1"
    assert board.cells[4].marked is True
    assert repo.calls == [
        ("update_cell", "c1", 4, True),
        ("update_cell", "c4", 1, False),
    ]


def test_switch_cells_twice_restores_order():
    board = make_board(4, marked={2})
    before = [(c.id, c.marked) for _, c in sorted(board.cells.items())]

    board.switch_cells(2, 3)
    board.switch_cells(2, 3)

    after = [(c.id, c.marked) for _, c in sorted(board.cells.items())]
    assert after == before


def test_switch_cells_missing_position():
    repo = FakeRepository()
    board = make_board(2, repository=repo)
    assert board.switch_cells(1, 3) is False
    assert board.switch_cells(5, 1) is False
    assert texts(board) == ["item 1", "item 2"]
    assert repo.calls == []


def test_switch_cells_failure_keeps_memory_swap():
    board = make_board(2, repository=FakeRepository(fail="update_cell"))
    assert board.switch_cells(1, 2) is False
    assert texts(board) == ["item 2", "item 1"]


def test_mark_cell_persists_mark():
    repo = FakeRepository()
    board = make_board(2, repository=repo)
    assert board.mark_cell(2) is True
    assert board.cells[2].marked is True
    assert repo.calls == [("update_cell", "c2", 2, True)]


def test_mark_missing_cell():
    repo = FakeRepository()
    board = make_board(2, repository=repo)
    assert board.mark_cell(3) is False
    assert repo.calls == []


def test_mark_cell_failure_still_marks_in_memory():
    board = make_board(2, repository=FakeRepository(fail="update_cell"))
    assert board.mark_cell(1) is False
    assert board.cells[1].marked is True


def test_reset_clears_marks():
    repo = FakeRepository()
    board = make_board(4, marked={1, 2}, repository=repo)
    assert board.is_completed() is True

    assert board.reset() is True

    assert not any(cell.marked for cell in board.cells.values())
    assert board.is_completed() is False
    assert repo.calls == [("reset_board", "b1")]


def test_reset_failure_still_clears_marks():
    board = make_board(4, marked={1, 2}, repository=FakeRepository(fail="reset_board"))
    assert board.reset() is False
    assert not any(cell.marked for cell in board.cells.values())
    assert board.is_completed() is False


def test_mark_after_reset_completes_again():
    board = make_board(4, marked={1, 2})
    board.reset()
    board.mark_cell(1)
    board.mark_cell(3)
    assert board.is_completed() is True


def test_new_board_without_repository_cannot_add():
    board = Board.new("chan")
    with pytest.raises(StorageError):
        board.add_cell("first")
    assert board.cells == {}
    assert (board.grid_size, board.line_length) == (4, 2)


def test_new_board_with_repository_adds_cells():
    repo = FakeRepository()
    board = Board.new("chan", "b1", repo)
    assert board.add_cell("first") == 1
    assert repo.calls == [("add_cell", "b1", "first", 1)]


def test_unpersisted_board_reports_failed_writes():
    board = Board.load(None, "chan", {1: Cell(id="x", text="one")}, None)
    assert board.mark_cell(1) is False
    assert board.cells[1].marked is True
    assert board.reset() is False
    assert board.cells[1].marked is False
    assert board.remove_cell(1) is False
    assert sorted(board.cells) == [1]


def test_switch_cells_second_write_failure_keeps_memory_swap():
    repo = FakeRepository(fail_on_call={"update_cell": 2})
    board = make_board(3, marked={3}, repository=repo)

    assert board.switch_cells(1, 3) is False

    assert texts(board) == ["item 3", "item 2", "item 1"]
    assert board.cells[1].marked is True
    assert repo.calls == [
        ("update_cell", "c1", 3, False),
        ("update_cell", "c3", 1, True),
    ]
