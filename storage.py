from __future__ import annotations

import json
import logging
import os
import uuid
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Optional

import httpx

from app.config import env_flag
from models import Cell, StorageError


logger = logging.getLogger(__name__)


USE_SUPABASE = env_flag("USE_SUPABASE")
SUPABASE_URL = (os.getenv("SUPABASE_URL") or "").rstrip("/")
SUPABASE_KEY = os.getenv("SUPABASE_KEY") or ""
SUPABASE_BOARDS_TABLE = os.getenv("SUPABASE_BOARDS_TABLE", "bingo_boards")
SUPABASE_CELLS_TABLE = os.getenv("SUPABASE_CELLS_TABLE", "bingo_cells")

DATA_FILE = Path(os.getenv("DATA_FILE_PATH", "data.json"))

_lock = Lock()


def _new_id() -> str:
    return uuid.uuid4().hex


# ---------------------------------------------------------------------------
# Supabase (PostgREST) backend
# ---------------------------------------------------------------------------

def _sb_headers(extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    base = {
        "apikey": SUPABASE_KEY,
        "Authorization": f"Bearer {SUPABASE_KEY}",
        "Accept": "application/json",
    }
    if extra:
        base.update(extra)
    return base


def _require_supabase() -> None:
    if not (SUPABASE_URL and SUPABASE_KEY):
        raise StorageError("Supabase credentials are not configured")


def _sb_url(table: str, query: str = "") -> str:
    url = f"{SUPABASE_URL}/rest/v1/{table}"
    return f"{url}?{query}" if query else url


def _sb_select(table: str, query: str) -> List[dict]:
    _require_supabase()
    with httpx.Client(timeout=30) as client:
        response = client.get(_sb_url(table, query), headers=_sb_headers())
        response.raise_for_status()
        return response.json()


def _sb_insert(table: str, row: dict) -> dict:
    _require_supabase()
    headers = _sb_headers({
        "Content-Type": "application/json",
        "Prefer": "return=representation",
    })
    with httpx.Client(timeout=30) as client:
        response = client.post(_sb_url(table), headers=headers, json=[row])
        response.raise_for_status()
        rows = response.json()
    if not rows:
        raise StorageError(f"Insert into {table} returned no rows")
    return rows[0]


def _sb_update(table: str, query: str, values: dict) -> List[dict]:
    _require_supabase()
    headers = _sb_headers({
        "Content-Type": "application/json",
        "Prefer": "return=representation",
    })
    with httpx.Client(timeout=30) as client:
        response = client.patch(_sb_url(table, query), headers=headers, json=values)
        response.raise_for_status()
        return response.json()


def _sb_delete(table: str, query: str) -> List[dict]:
    _require_supabase()
    with httpx.Client(timeout=30) as client:
        response = client.delete(
            _sb_url(table, query), headers=_sb_headers({"Prefer": "return=representation"})
        )
        response.raise_for_status()
        return response.json()


def _sb_find_board(channel: str) -> Optional[str]:
    rows = _sb_select(SUPABASE_BOARDS_TABLE, f"channel=eq.{channel}&select=id")
    if not rows:
        return None
    return rows[0]["id"]


def _sb_create_board(channel: str) -> str:
    row = _sb_insert(SUPABASE_BOARDS_TABLE, {"id": _new_id(), "channel": channel})
    return row["id"]


def _sb_delete_board(board_id: str) -> None:
    _sb_delete(SUPABASE_CELLS_TABLE, f"board_id=eq.{board_id}")
    _sb_delete(SUPABASE_BOARDS_TABLE, f"id=eq.{board_id}")


def _sb_load_cells(board_id: str) -> List[dict]:
    return _sb_select(
        SUPABASE_CELLS_TABLE,
        f"board_id=eq.{board_id}&select=id,text,position,marked&order=position.asc",
    )


def _sb_add_cell(board_id: str, text: str, position: int) -> str:
    row = _sb_insert(SUPABASE_CELLS_TABLE, {
        "id": _new_id(),
        "board_id": board_id,
        "text": text,
        "position": position,
        "marked": False,
    })
    return row["id"]


def _sb_remove_cell(board_id: str, position: int, cell_id: str) -> None:
    if not _sb_delete(SUPABASE_CELLS_TABLE, f"id=eq.{cell_id}"):
        raise StorageError(f"Unknown cell {cell_id}")
    # PostgREST cannot express ``position = position - 1``, so shift row by row
    later = _sb_select(
        SUPABASE_CELLS_TABLE,
        f"board_id=eq.{board_id}&position=gt.{position}&select=id,position&order=position.asc",
    )
    for row in later:
        _sb_update(SUPABASE_CELLS_TABLE, f"id=eq.{row['id']}", {"position": row["position"] - 1})


def _sb_update_cell(cell_id: str, position: int, marked: bool) -> None:
    rows = _sb_update(
        SUPABASE_CELLS_TABLE, f"id=eq.{cell_id}", {"position": position, "marked": marked}
    )
    if not rows:
        raise StorageError(f"Unknown cell {cell_id}")


def _sb_reset_board(board_id: str) -> None:
    _sb_update(SUPABASE_CELLS_TABLE, f"board_id=eq.{board_id}", {"marked": False})


# ---------------------------------------------------------------------------
# JSON file backend
# ---------------------------------------------------------------------------

def _empty_data() -> Dict[str, dict]:
    return {"boards": {}, "cells": {}}


def _file_load_all() -> Dict[str, dict]:
    if DATA_FILE.exists():
        try:
            data = json.loads(DATA_FILE.read_text(encoding="utf-8")) or {}
        except json.JSONDecodeError:
            logger.warning("DATA_FILE is corrupted or empty, starting from scratch")
            return _empty_data()
        data.setdefault("boards", {})
        data.setdefault("cells", {})
        return data
    return _empty_data()


def _file_save_all(data: Dict[str, dict]) -> None:
    DATA_FILE.parent.mkdir(parents=True, exist_ok=True)
    tmp = DATA_FILE.with_suffix(".tmp")
    tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    tmp.replace(DATA_FILE)


def _board_cells(data: Dict[str, dict], board_id: str) -> Dict[str, dict]:
    return {
        cell_id: row
        for cell_id, row in data["cells"].items()
        if row.get("board_id") == board_id
    }


def _file_find_board(channel: str) -> Optional[str]:
    with _lock:
        data = _file_load_all()
    for board_id, row in data["boards"].items():
        if row.get("channel") == channel:
            return board_id
    return None


def _file_create_board(channel: str) -> str:
    board_id = _new_id()
    with _lock:
        data = _file_load_all()
        data["boards"][board_id] = {"channel": channel}
        _file_save_all(data)
    return board_id


def _file_delete_board(board_id: str) -> None:
    with _lock:
        data = _file_load_all()
        data["boards"].pop(board_id, None)
        for cell_id in _board_cells(data, board_id):
            del data["cells"][cell_id]
        _file_save_all(data)


def _file_load_cells(board_id: str) -> List[dict]:
    with _lock:
        data = _file_load_all()
    rows = [{"id": cell_id, **row} for cell_id, row in _board_cells(data, board_id).items()]
    return sorted(rows, key=lambda row: row["position"])


def _file_add_cell(board_id: str, text: str, position: int) -> str:
    cell_id = _new_id()
    with _lock:
        data = _file_load_all()
        if board_id not in data["boards"]:
            raise StorageError(f"Unknown board {board_id}")
        data["cells"][cell_id] = {
            "board_id": board_id,
            "text": text,
            "position": position,
            "marked": False,
        }
        _file_save_all(data)
    return cell_id


def _file_remove_cell(board_id: str, position: int, cell_id: str) -> None:
    with _lock:
        data = _file_load_all()
        if data["cells"].pop(cell_id, None) is None:
            raise StorageError(f"Unknown cell {cell_id}")
        for row in _board_cells(data, board_id).values():
            if row["position"] > position:
                row["position"] -= 1
        _file_save_all(data)


def _file_update_cell(cell_id: str, position: int, marked: bool) -> None:
    with _lock:
        data = _file_load_all()
        row = data["cells"].get(cell_id)
        if row is None:
            raise StorageError(f"Unknown cell {cell_id}")
        row["position"] = position
        row["marked"] = marked
        _file_save_all(data)


def _file_reset_board(board_id: str) -> None:
    with _lock:
        data = _file_load_all()
        for row in _board_cells(data, board_id).values():
            row["marked"] = False
        _file_save_all(data)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def _call(action: str, sb_func, file_func, *args: Any) -> Any:
    try:
        if USE_SUPABASE:
            return sb_func(*args)
        return file_func(*args)
    except StorageError:
        logger.exception("Failed to %s", action)
        raise
    except (OSError, httpx.HTTPError, KeyError, ValueError) as exc:
        logger.exception("Failed to %s", action)
        raise StorageError(str(exc)) from exc


def find_board(channel: str) -> Optional[str]:
    return _call("find board", _sb_find_board, _file_find_board, channel)


def create_board(channel: str) -> str:
    board_id = _call("create board", _sb_create_board, _file_create_board, channel)
    logger.info("Created board %s for channel %s", board_id, channel)
    return board_id


def delete_board(board_id: str) -> None:
    _call("delete board", _sb_delete_board, _file_delete_board, board_id)


def load_cells(board_id: str) -> Dict[int, Cell]:
    rows = _call("load cells", _sb_load_cells, _file_load_cells, board_id)
    return {
        int(row["position"]): Cell(
            id=row["id"],
            text=str(row.get("text", "")),
            marked=bool(row.get("marked", False)),
        )
        for row in rows
    }


def add_cell(board_id: str, text: str, position: int) -> str:
    return _call("add cell", _sb_add_cell, _file_add_cell, board_id, text, position)


def remove_cell(board_id: str, position: int, cell_id: str) -> None:
    _call("remove cell", _sb_remove_cell, _file_remove_cell, board_id, position, cell_id)


def update_cell(cell_id: str, position: int, marked: bool) -> None:
    _call("update cell", _sb_update_cell, _file_update_cell, cell_id, position, marked)


def reset_board(board_id: str) -> None:
    _call("reset board", _sb_reset_board, _file_reset_board, board_id)
