"""Chat commands for building and placing tiles."""

import logging
import re
from io import BytesIO
from pathlib import Path

from aiogram import F, Router
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.filters.callback_data import CallbackData
from aiogram.types import BotCommand, BufferedInputFile, CallbackQuery, Message
from aiogram.utils.keyboard import InlineKeyboardBuilder

from tile_planner.data import base_rules
from tile_planner.data.models import TileType
from tile_planner.map.hexes import LogicalCoordinate, PhysicalCoordinate
from tile_planner.map.images import render_board
from tile_planner.map.tiles import Tile
from tile_planner.state.engine import InvalidPlacementError, PlacementEngine
from tile_planner.state.storage import FileStorage

logger = logging.getLogger(__name__)

PATH_SAVES = Path(__file__).resolve().parents[3] / "saves"

WINDOW_SIZE = PhysicalCoordinate(x=800, y=600)
"""Virtual viewport, only used to center the view on reset."""

N_SPOTS = 10

COORD_REGEX = r"^\s*(-?\d+)\s*[,\s]\s*(-?\d+)\s*$"

ChatID = int

cmds: dict[str, BotCommand] = {
    "start": BotCommand(command="start", description="Start (or continue) a game."),
    "help": BotCommand(command="help", description="Get help for this bot."),
    "add": BotCommand(command="add", description="Add a side: /add <type> [slot]"),
    "fill": BotCommand(command="fill", description="Fill the rest: /fill <type>"),
    "clear": BotCommand(command="clear", description="Clear the candidate."),
    "undotile": BotCommand(command="undotile", description="Undo a build step."),
    "rotate": BotCommand(command="rotate", description="Rotate: /rotate [n]"),
    "place": BotCommand(command="place", description="Place the candidate: /place x y"),
    "remove": BotCommand(command="remove", description="Take a tile back: /remove x y"),
    "undo": BotCommand(command="undo", description="Undo the last placement."),
    "mark": BotCommand(command="mark", description="Bookmark a cell: /mark x y"),
    "unmark": BotCommand(command="unmark", description="Remove a bookmark: /unmark x y"),
    "spots": BotCommand(command="spots", description="Best spots for the candidate."),
    "map": BotCommand(command="map", description="Show the board."),
    "export": BotCommand(command="export", description="Get the saved game."),
    "import": BotCommand(command="import", description="Load a game: /import <json>"),
    "reset": BotCommand(command="reset", description="Start over."),
}

HELP_STR = """Hello! I help you plan where to put hexagonal tiles.

Build the candidate tile side by side with /add (or the buttons), \
or /fill the remaining sides. When it is complete, /spots shows where it fits \
best and /place x y puts it on the board. /undo takes the last tile back.

Tile types: {types}
"""

r_game = Router()


def help_text() -> str:
    return HELP_STR.format(types=", ".join(tt.value for tt in base_rules.fill_types))


def parse_tile_type(text: str) -> TileType:
    """Tile type by (case-insensitive) name."""
    name = text.strip().replace(" ", "").lower()
    for tt in TileType:
        if tt != TileType.Unknown and tt.value.lower() == name:
            return tt
    raise ValueError(f"Unknown tile type: {text!r}")


def parse_coordinate(text: str | None) -> LogicalCoordinate:
    """Coordinate from 'x y' or 'x,y'."""
    m = re.match(COORD_REGEX, text or "")
    if m is None:
        raise ValueError(f"Expected a coordinate like '1 -2', got: {text!r}")
    return LogicalCoordinate(x=int(m.group(1)), y=int(m.group(2)))


def describe_tile(tile: Tile) -> str:
    """Short text form of a tile."""
    if tile.is_empty():
        return "(empty)"
    return " / ".join(
        "?" if tt == TileType.Unknown else base_rules.config(tt).display_name
        for tt in tile.items
    )


def describe_spots(engine: PlacementEngine, n_spots: int = N_SPOTS) -> str:
    """Best frontier cells for the candidate."""
    if not engine.candidate().is_complete():
        return "The candidate isn't complete yet."
    edges = sorted(
        engine.edges(), key=lambda li: (-li.item.good, li.item.all - li.item.good)
    )
    if len(edges) == 0:
        return "The candidate doesn't fit anywhere."
    lines = ["Best spots (matching / touching):"]
    for li in edges[:n_spots]:
        star = " *" if engine.has_mark(li.coordinate) else ""
        lines.append(f"{li.coordinate}: {li.item.good}/{li.item.all}{star}")
    summary = engine.summary()
    perfect = ", ".join(f"{n}x{all_}" for all_, n in summary.perfect_spots.items())
    lines.append(f"Perfect spots by neighbors: {perfect or 'none'}")
    return "\n".join(lines)


def board_png(engine: PlacementEngine) -> bytes:
    """Image of the board as PNG."""
    img = render_board(
        list(engine.tiles()),
        list(engine.edges()),
        list(engine.marks()),
        rules=engine.rules,
    )
    tmpio = BytesIO()
    img.save(tmpio, format="PNG")
    return tmpio.getvalue()


class TileActionCallback(CallbackData, prefix="tile"):
    """Candidate building button."""

    action: str
    tile_type: str


def make_tile_kb() -> InlineKeyboardBuilder:
    """Buttons to add or fill tile types."""
    builder = InlineKeyboardBuilder()
    for tt in base_rules.normal_types:
        builder.button(
            text=f"+ {base_rules.config(tt).display_name}",
            callback_data=TileActionCallback(action="add", tile_type=tt.value).pack(),
        )
    for tt in base_rules.fill_types:
        builder.button(
            text=f"Fill {base_rules.config(tt).display_name}",
            callback_data=TileActionCallback(action="fill", tile_type=tt.value).pack(),
        )
    builder.adjust(3)
    return builder


class GameBackend(object):
    """One engine per chat, each saved in its own file."""

    def __init__(self, path_saves: Path = PATH_SAVES):
        self.path_saves = path_saves
        self.games: dict[ChatID, PlacementEngine] = {}

    def get_game(self, chat_id: ChatID) -> PlacementEngine:
        """Get the engine of a chat, loading its saved game on first use."""
        engine = self.games.get(chat_id)
        if engine is None:
            storage = FileStorage(self.path_saves / f"{chat_id}.json")
            engine = PlacementEngine(storage=storage)
            engine.set_window_size(WINDOW_SIZE)
            engine.init()
            self.games[chat_id] = engine
            logger.info(f"Loaded game for chat {chat_id}")
        return engine

    def status(self, chat_id: ChatID) -> str:
        """Candidate and board status."""
        engine = self.get_game(chat_id)
        return "\n".join(
            [
                f"Candidate: {describe_tile(engine.candidate())}",
                f"Tiles on board: {len(engine.tiles())}, marks: {len(engine.marks())}",
            ]
        )


gback = GameBackend()


async def answer_status(message: Message, extra: str | None = None) -> None:
    text = gback.status(message.chat.id)
    if extra:
        text = f"{extra}\n{text}"
    await message.answer(text, reply_markup=make_tile_kb().as_markup())


@r_game.message(CommandStart())
async def start_game(message: Message):
    """Start."""
    await message.answer(help_text())
    await answer_status(message)


@r_game.message(Command(cmds["help"]))
async def show_help(message: Message):
    """Show help."""
    await message.answer(help_text())


@r_game.message(Command(cmds["add"]))
async def add_side(message: Message, command: CommandObject):
    """Add a side to the candidate."""
    engine = gback.get_game(message.chat.id)
    args = (command.args or "").split()
    try:
        if len(args) not in (1, 2):
            raise ValueError("Usage: /add TYPE [SLOT]")
        tile_type = parse_tile_type(args[0])
        position = int(args[1]) if len(args) == 2 else None
        engine.add_tile(tile_type, position)
    except (ValueError, IndexError) as err:
        await message.answer(str(err))
        return
    await answer_status(message)


@r_game.message(Command(cmds["fill"]))
async def fill_sides(message: Message, command: CommandObject):
    """Fill the candidate."""
    engine = gback.get_game(message.chat.id)
    try:
        engine.fill_tile(parse_tile_type(command.args or ""))
    except ValueError as err:
        await message.answer(str(err))
        return
    await answer_status(message)


@r_game.message(Command(cmds["clear"]))
async def clear_candidate(message: Message):
    gback.get_game(message.chat.id).clear_candidate()
    await answer_status(message)


@r_game.message(Command(cmds["undotile"]))
async def undo_side(message: Message):
    gback.get_game(message.chat.id).undo_tile()
    await answer_status(message)


@r_game.message(Command(cmds["rotate"]))
async def rotate_candidate(message: Message, command: CommandObject):
    """Rotate the candidate clockwise (negative: counterclockwise)."""
    engine = gback.get_game(message.chat.id)
    try:
        steps = int(command.args) if command.args else 1
    except ValueError:
        await message.answer("Usage: /rotate [n]")
        return
    for _ in range(abs(steps)):
        engine.rotate_candidate(-1 if steps > 0 else 1)
    await answer_status(message)


@r_game.message(Command(cmds["place"]))
async def place_candidate(message: Message, command: CommandObject):
    """Place the candidate."""
    engine = gback.get_game(message.chat.id)
    try:
        coord = parse_coordinate(command.args)
        engine.add_candidate(coord, check_validity=True)
    except InvalidPlacementError:
        await message.answer(
            f"The candidate doesn't fit at {coord} like this, try to /rotate it."
        )
        return
    except ValueError as err:
        await message.answer(str(err))
        return
    await answer_status(message, f"Placed at {coord}.")


@r_game.message(Command(cmds["remove"]))
async def remove_tile(message: Message, command: CommandObject):
    """Take a tile back from the board."""
    engine = gback.get_game(message.chat.id)
    try:
        coord = parse_coordinate(command.args)
    except ValueError as err:
        await message.answer(str(err))
        return
    if not engine.has_tile(coord):
        await message.answer(f"There is no tile at {coord}.")
        return
    engine.remove_tile(coord)
    await answer_status(message, f"Took back the tile at {coord}.")


@r_game.message(Command(cmds["undo"]))
async def undo_placement(message: Message):
    engine = gback.get_game(message.chat.id)
    if not engine.can_undo_placement():
        await message.answer("Nothing to undo.")
        return
    engine.undo_placement()
    await answer_status(message)


@r_game.message(Command(cmds["mark"]))
async def add_mark(message: Message, command: CommandObject):
    engine = gback.get_game(message.chat.id)
    try:
        coord = parse_coordinate(command.args)
    except ValueError as err:
        await message.answer(str(err))
        return
    engine.add_mark(coord)
    await answer_status(message)


@r_game.message(Command(cmds["unmark"]))
async def remove_mark(message: Message, command: CommandObject):
    engine = gback.get_game(message.chat.id)
    try:
        coord = parse_coordinate(command.args)
    except ValueError as err:
        await message.answer(str(err))
        return
    engine.remove_mark(coord)
    await answer_status(message)


@r_game.message(Command(cmds["spots"]))
async def show_spots(message: Message):
    await message.answer(describe_spots(gback.get_game(message.chat.id)))


@r_game.message(Command(cmds["map"]))
async def show_map(message: Message):
    """Send an image of the board."""
    chat_id = message.chat.id
    png = board_png(gback.get_game(chat_id))
    await message.answer_photo(
        BufferedInputFile(png, filename=f"{chat_id}_map.png"),
        caption=gback.status(chat_id),
    )


@r_game.message(Command(cmds["export"]))
async def export_game(message: Message):
    chat_id = message.chat.id
    data = gback.get_game(chat_id).serialize()
    await message.answer_document(
        BufferedInputFile(data.encode("utf-8"), filename=f"game_{chat_id}.json")
    )


@r_game.message(Command(cmds["import"]))
async def import_game(message: Message, command: CommandObject):
    """Replace the game with an exported one."""
    engine = gback.get_game(message.chat.id)
    try:
        engine.deserialize(command.args or "")
    except ValueError:
        await message.answer("That isn't a valid saved game, nothing changed.")
        return
    await answer_status(message, "Game imported.")


@r_game.message(Command(cmds["reset"]))
async def reset_game(message: Message):
    gback.get_game(message.chat.id).reset()
    await answer_status(message, "New game started.")


@r_game.callback_query(TileActionCallback.filter(F.action.in_({"add", "fill"})))
async def cb_tile_action(query: CallbackQuery, callback_data: TileActionCallback):
    """Tile button pressed."""
    msg = query.message
    assert msg is not None

    engine = gback.get_game(msg.chat.id)
    tile_type = TileType(callback_data.tile_type)
    try:
        if callback_data.action == "add":
            engine.add_tile(tile_type)
        else:
            engine.fill_tile(tile_type)
    except ValueError as err:
        await query.answer(str(err))
        return
    await query.answer()
    await msg.answer(
        gback.status(msg.chat.id), reply_markup=make_tile_kb().as_markup()
    )
