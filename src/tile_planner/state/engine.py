"""Placement engine: the board, the candidate, marks and undo."""

import logging
from typing import Callable

from pydantic import BaseModel

from tile_planner.data import base_rules
from tile_planner.data.models import GameRules, TileType
from tile_planner.map.hexes import (
    LogicalCoordinate,
    PhysicalCoordinate,
    opposite_direction,
    tile_map_key,
)
from tile_planner.map.tiles import N_SIDES, Edge, LogicalItem, Tile
from tile_planner.map.view import DisplayPosition
from .candidate import CandidateBuilder, CandidateState
from .codec import GameDataError, SavedGame, deserialize_game, serialize_game
from .storage import GameStorage, MemoryStorage

logger = logging.getLogger(__name__)

START_COORD = LogicalCoordinate(x=0, y=0)
START_TILE = Tile.single_tile(TileType.Grassland)

Listener = Callable[[], None]


class PlacementError(ValueError):
    """The candidate can't be placed."""


class NotReadyError(PlacementError):
    """The candidate isn't complete yet."""


class OccupiedError(PlacementError):
    """There already is a tile at the target."""


class InvalidPlacementError(PlacementError):
    """The candidate doesn't fit at the target."""


class BoardSummary(BaseModel):
    """Overview of the current board for the candidate."""

    tiles: int
    marks: int
    perfect_spots: dict[int, int] = {}
    """Number of perfectly matching free cells, by number of placed neighbors."""
    other_spots: int = 0


class PlacementEngine(object):
    """Owns the whole game state.

    Every mutation goes through a method of this class. Listeners are called
    after each completed mutation. The game is saved to `storage` after board
    and mark changes (candidate and view changes alone aren't saved).
    """

    def __init__(
        self,
        storage: GameStorage | None = None,
        rules: GameRules = base_rules,
    ):
        self.rules = rules
        self.storage: GameStorage = storage if storage is not None else MemoryStorage()
        self.display_position = DisplayPosition()
        self._window_size: PhysicalCoordinate | None = None
        self._tiles: dict[str, LogicalItem[Tile]] = {}
        self._marks: dict[str, LogicalCoordinate] = {}
        self._builder = CandidateBuilder(rules)
        # Undo stacks
        self._placements: list[str] = []
        self._pending: list[Tile] = []
        self._listeners: list[Listener] = []

    # Observers

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener` after every change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _changed(self, save: bool = False) -> None:
        if save:
            self.storage.save_string(self.serialize())
        for listener in list(self._listeners):
            listener()

    # Viewport

    def set_window_size(self, size: PhysicalCoordinate) -> None:
        self._window_size = size

    def get_window_size(self) -> PhysicalCoordinate:
        if self._window_size is None:
            raise RuntimeError("No window size")
        return self._window_size

    def set_display_position(self, display_position: DisplayPosition) -> None:
        """Update pan/zoom of the view."""
        self.display_position = display_position
        self._changed()

    # Lifecycle

    def init(self) -> None:
        """Load the saved game, or start a new one."""
        data = self.storage.load_string()
        if data is not None:
            try:
                saved = deserialize_game(data)
            except GameDataError as err:
                logger.warning(f"Saved game is corrupt, starting over: {err}")
            else:
                self._load(saved)
                self._changed()
                return
        self.reset()

    def reset(self) -> None:
        """Start a new game with a single grassland tile."""
        size = self.get_window_size()
        self._tiles = {
            tile_map_key(START_COORD): LogicalItem[Tile](
                coordinate=START_COORD, item=START_TILE
            )
        }
        self._marks = {}
        self._placements.clear()
        self._pending.clear()
        self._builder.replace(Tile())
        self.display_position = DisplayPosition.centered(size)
        logger.debug("Game reset.")
        self._changed(save=True)

    # Read-only views

    def tiles(self) -> tuple[LogicalItem[Tile], ...]:
        return tuple(self._tiles.values())

    def get_tile(self, coordinate: LogicalCoordinate) -> LogicalItem[Tile] | None:
        return self._tiles.get(tile_map_key(coordinate))

    def has_tile(self, coordinate: LogicalCoordinate) -> bool:
        return tile_map_key(coordinate) in self._tiles

    def candidate(self) -> Tile:
        return self._builder.tile

    def candidate_state(self) -> CandidateState:
        return self._builder.state

    def can_undo_placement(self) -> bool:
        return len(self._placements) > 0

    def can_undo_tile(self) -> bool:
        return self._builder.can_undo()

    def marks(self) -> tuple[LogicalCoordinate, ...]:
        return tuple(self._marks.values())

    def has_mark(self, coordinate: LogicalCoordinate) -> bool:
        return tile_map_key(coordinate) in self._marks

    # Candidate building

    def add_tile(self, tile_type: TileType, position: int | None = None) -> None:
        """Add a side to the candidate."""
        self._builder.add(tile_type, position)
        self._changed()

    def fill_tile(self, tile_type: TileType) -> None:
        """Fill the rest of the candidate."""
        self._builder.fill(tile_type)
        self._changed()

    def clear_candidate(self) -> None:
        self._builder.clear()
        self._changed()

    def rotate_candidate(self, delta: int) -> None:
        self._builder.rotate(delta)
        self._changed()

    def undo_tile(self) -> None:
        """Undo the last build step of the candidate."""
        if not self._builder.can_undo():
            return
        self._builder.undo()
        self._changed()

    def _take_back(self, tile: Tile) -> None:
        """Make a tile from the board the candidate, keeping the current one aside.

        Any started candidate is kept aside, not only a complete one, so a
        partly built tile also comes back after the next placement.
        """
        current = self._builder.tile
        if not current.is_empty():
            self._pending.append(current)
        self._builder.replace(tile)

    # Placement

    def can_add_candidate(
        self, coordinate: LogicalCoordinate, check_validity: bool = True
    ) -> bool:
        """Whether the candidate can go to `coordinate` in some rotation."""
        candidate = self._builder.tile
        if not candidate.is_complete() or self.has_tile(coordinate):
            return False
        if not check_validity:
            return True
        return any(
            self.get_edge(candidate, coordinate, rotation) is not None
            for rotation in range(N_SIDES)
        )

    def add_candidate(
        self, coordinate: LogicalCoordinate, check_validity: bool = False
    ) -> None:
        """Place the candidate, as currently rotated, at `coordinate`.

        With `check_validity`, the current rotation must fit the neighbors.
        """
        candidate = self._builder.tile
        if not candidate.is_complete():
            raise NotReadyError("Not ready")
        if self.has_tile(coordinate):
            raise OccupiedError(f"There already is a tile at {coordinate}")
        if check_validity and self.get_edge(candidate, coordinate, 0) is None:
            raise InvalidPlacementError("Cannot put here")

        key = tile_map_key(coordinate)
        self._tiles[key] = LogicalItem[Tile](coordinate=coordinate, item=candidate)
        self._placements.append(key)
        self._marks.pop(key, None)
        next_tile = self._pending.pop() if self._pending else Tile()
        self._builder.replace(next_tile)
        logger.debug(f"Placed {candidate} at {coordinate}")
        self._changed(save=True)

    def remove_tile(self, coordinate: LogicalCoordinate) -> None:
        """Take a tile off the board and make it the candidate."""
        key = tile_map_key(coordinate)
        removed = self._tiles.pop(key, None)
        if removed is None:
            return
        self._placements = [k for k in self._placements if k != key]
        self._take_back(removed.item)
        logger.debug(f"Removed {removed.item} from {coordinate}")
        self._changed(save=True)

    def undo_placement(self) -> None:
        """Take back the last placed tile."""
        if not self._placements:
            return
        # remove_tile keeps the history in sync with the board
        removed = self._tiles.pop(self._placements.pop())
        self._take_back(removed.item)
        logger.debug(f"Undid placement at {removed.coordinate}")
        self._changed(save=True)

    # Marks

    def add_mark(self, coordinate: LogicalCoordinate) -> None:
        """Bookmark a free cell (occupied cells are ignored)."""
        key = tile_map_key(coordinate)
        if key in self._tiles or key in self._marks:
            return
        self._marks[key] = coordinate
        self._changed(save=True)

    def remove_mark(self, coordinate: LogicalCoordinate) -> None:
        key = tile_map_key(coordinate)
        if self._marks.pop(key, None) is None:
            return
        self._changed(save=True)

    # Edges

    def get_edge(
        self, candidate: Tile, coordinate: LogicalCoordinate, rotation: int
    ) -> Edge | None:
        """Match quality of `candidate` (rotated) at a free cell.

        Returns None if no tile touches the cell, or if an exclusive type
        (e.g. river) doesn't match its neighbor.
        """
        n_all = 0
        n_good = 0
        for direction, neighbor in enumerate(coordinate.neighbors):
            placed = self._tiles.get(tile_map_key(neighbor))
            if placed is None:
                continue
            mine = candidate.get_item((direction + rotation) % N_SIDES)
            theirs = placed.item.get_item(opposite_direction(direction))
            matches = self.rules.does_match(mine, theirs)
            if not matches and (
                self.rules.is_exclusive(mine) or self.rules.is_exclusive(theirs)
            ):
                return None
            n_all += 1
            if matches:
                n_good += 1
        if n_all == 0:
            return None
        return Edge(all=n_all, good=n_good)

    def frontier(self) -> list[LogicalCoordinate]:
        """Free cells next to at least one placed tile."""
        free: dict[str, LogicalCoordinate] = {}
        for placed in self._tiles.values():
            for neighbor in placed.coordinate.neighbors:
                key = tile_map_key(neighbor)
                if key not in self._tiles:
                    free.setdefault(key, neighbor)
        return list(free.values())

    def edges(self) -> tuple[LogicalItem[Edge], ...]:
        """Best edge (over all rotations) of the candidate at every frontier cell."""
        candidate = self._builder.tile
        if not candidate.is_complete():
            return ()
        res: list[LogicalItem[Edge]] = []
        for coordinate in self.frontier():
            best: Edge | None = None
            for rotation in range(N_SIDES):
                edge = self.get_edge(candidate, coordinate, rotation)
                if edge is not None and (best is None or edge.good > best.good):
                    best = edge
            if best is not None:
                res.append(LogicalItem[Edge](coordinate=coordinate, item=best))
        return tuple(res)

    def summary(self) -> BoardSummary:
        """Count the spots available for the candidate."""
        perfect: dict[int, int] = {}
        other = 0
        for edge in self.edges():
            if edge.item.is_good():
                perfect[edge.item.all] = perfect.get(edge.item.all, 0) + 1
            else:
                other += 1
        return BoardSummary(
            tiles=len(self._tiles),
            marks=len(self._marks),
            perfect_spots=dict(sorted(perfect.items())),
            other_spots=other,
        )

    # Persistence

    def serialize(self) -> str:
        return serialize_game(
            list(self._tiles.values()), list(self._marks.values()), self.display_position
        )

    def deserialize(self, data: str) -> None:
        """Replace the game with a serialized one.

        Raises `GameDataError` (leaving the game untouched) on bad data.
        """
        try:
            saved = deserialize_game(data)
        except GameDataError:
            logger.warning("Rejected saved game data.")
            raise
        self._load(saved)
        self._changed(save=True)

    def _load(self, saved: SavedGame) -> None:
        tiles = {tile_map_key(li.coordinate): li for li in saved.placed_tiles()}
        marks: dict[str, LogicalCoordinate] = {}
        for coord in saved.marks:
            key = tile_map_key(coord)
            if key in tiles:
                logger.warning(f"Dropping mark on occupied cell {coord}")
                continue
            marks[key] = coord
        self._tiles = tiles
        self._marks = marks
        self.display_position = saved.display_position
        self._placements.clear()
        self._pending.clear()
        self._builder.history.clear()
