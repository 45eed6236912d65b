from __future__ import annotations
from telegram import Update
from telegram.ext import ContextTypes

import logging

from logic.parser import parse_position, parse_positions
from models import StorageError
from sessions import registry_from


logger = logging.getLogger(__name__)


HELP_TEXT = (
    'Bingo commands:\n'
    '/bingo - show the board\n'
    '/add <text> - add a cell\n'
    '/remove <n> - remove cell n\n'
    '/switch <a> <b> - swap two cells\n'
    '/mark <n> - mark cell n as done\n'
    '/reset - clear all marks\n'
    '/clear - delete the board'
)
BINGO_TEXT = 'BINGO! A full line is marked.'
STORAGE_FAILED_TEXT = 'Could not reach the board storage, please try again later.'


def _channel(update: Update) -> str:
    return str(update.effective_chat.id)


def _args_text(context: ContextTypes.DEFAULT_TYPE) -> str:
    return ' '.join(getattr(context, 'args', None) or []).strip()


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.message.reply_text(HELP_TEXT)


async def show_board(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    registry = registry_from(context)
    channel = _channel(update)
    async with registry.lock(channel):
        try:
            board = registry.get(channel)
        except StorageError:
            await update.message.reply_text(STORAGE_FAILED_TEXT)
            return
        await update.message.reply_text(board.to_string())


async def add_cell(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    text = _args_text(context)
    if not text:
        await update.message.reply_text('Usage: /add <text>')
        return

    registry = registry_from(context)
    channel = _channel(update)
    async with registry.lock(channel):
        try:
            board = registry.get(channel)
            position = board.add_cell(text)
        except StorageError:
            await update.message.reply_text(STORAGE_FAILED_TEXT)
            return
        logger.info('Added cell %s to channel %s', position, channel)
        await update.message.reply_text(f'Added as #{position}.\n\n{board.to_string()}')


async def remove_cell(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    position = parse_position(_args_text(context))
    if position is None:
        await update.message.reply_text('Usage: /remove <n>')
        return

    registry = registry_from(context)
    channel = _channel(update)
    async with registry.lock(channel):
        try:
            board = registry.get(channel)
        except StorageError:
            await update.message.reply_text(STORAGE_FAILED_TEXT)
            return
        if position not in board.cells:
            await update.message.reply_text(f'There is no cell #{position}.')
            return
        if not board.remove_cell(position):
            await update.message.reply_text(STORAGE_FAILED_TEXT)
            return
        await update.message.reply_text(f'Removed #{position}.\n\n{board.to_string()}')


async def switch_cells(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    positions = parse_positions(_args_text(context), 2)
    if positions is None:
        await update.message.reply_text('Usage: /switch <a> <b>')
        return
    first, second = positions

    registry = registry_from(context)
    channel = _channel(update)
    async with registry.lock(channel):
        try:
            board = registry.get(channel)
        except StorageError:
            await update.message.reply_text(STORAGE_FAILED_TEXT)
            return
        missing = [pos for pos in positions if pos not in board.cells]
        if missing:
            await update.message.reply_text(f'There is no cell #{missing[0]}.')
            return
        if not board.switch_cells(first, second):
            # the board was reordered in memory, only saving failed
            await update.message.reply_text(f'{STORAGE_FAILED_TEXT}\n\n{board.to_string()}')
            return
        await update.message.reply_text(f'Switched #{first} and #{second}.\n\n{board.to_string()}')


async def mark_cell(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    position = parse_position(_args_text(context))
    if position is None:
        await update.message.reply_text('Usage: /mark <n>')
        return

    registry = registry_from(context)
    channel = _channel(update)
    async with registry.lock(channel):
        try:
            board = registry.get(channel)
        except StorageError:
            await update.message.reply_text(STORAGE_FAILED_TEXT)
            return
        if position not in board.cells:
            await update.message.reply_text(f'There is no cell #{position}.')
            return
        saved = board.mark_cell(position)
        await update.message.reply_text(board.to_string())
        if not saved:
            await update.message.reply_text(STORAGE_FAILED_TEXT)
        if board.is_completed():
            logger.info('Board completed in channel %s', channel)
            await update.message.reply_text(BINGO_TEXT)


async def reset_board(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    registry = registry_from(context)
    channel = _channel(update)
    async with registry.lock(channel):
        try:
            board = registry.get(channel)
        except StorageError:
            await update.message.reply_text(STORAGE_FAILED_TEXT)
            return
        saved = board.reset()
        await update.message.reply_text(board.to_string())
        if not saved:
            await update.message.reply_text(STORAGE_FAILED_TEXT)


async def clear_board(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    registry = registry_from(context)
    channel = _channel(update)
    async with registry.lock(channel):
        try:
            registry.close(channel)
        except StorageError:
            await update.message.reply_text(STORAGE_FAILED_TEXT)
            return
        await update.message.reply_text('Board deleted.')


COMMANDS = (
    (['start', 'help'], help_command),
    (['bingo', 'board'], show_board),
    ('add', add_cell),
    ('remove', remove_cell),
    ('switch', switch_cells),
    ('mark', mark_cell),
    ('reset', reset_board),
    ('clear', clear_board),
)


__all__ = [
    'COMMANDS',
    'add_cell',
    'clear_board',
    'help_command',
    'mark_cell',
    'remove_cell',
    'reset_board',
    'show_board',
    'switch_cells',
]
