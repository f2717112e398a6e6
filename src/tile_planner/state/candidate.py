"""Construction of the candidate tile."""

from enum import Enum

from tile_planner.data import base_rules
from tile_planner.data.models import GameRules, TileType
from tile_planner.map.tiles import Tile, TileFullError


class CandidateState(str, Enum):
    """Construction state of the candidate."""

    EMPTY = "EMPTY"
    BUILDING = "BUILDING"
    COMPLETE = "COMPLETE"


class CandidateBuilder(object):
    """Candidate tile with an undo stack of build steps.

    Every build step (add, fill, clear) pushes the previous tile. Rotation is
    not a build step.
    """

    def __init__(self, rules: GameRules = base_rules):
        self.rules = rules
        self.tile = Tile()
        self.history: list[Tile] = []

    @property
    def state(self) -> CandidateState:
        if self.tile.is_complete():
            return CandidateState.COMPLETE
        if self.tile.is_empty():
            return CandidateState.EMPTY
        return CandidateState.BUILDING

    def can_undo(self) -> bool:
        return len(self.history) > 0

    def add(self, tile_type: TileType, position: int | None = None) -> Tile:
        """Set one side of the candidate."""
        if self.tile.is_complete():
            raise TileFullError("Tile is full")
        if tile_type == TileType.Unknown:
            raise ValueError("Can't add an unknown side.")
        new_tile = self.tile.add(tile_type, position)
        self.history.append(self.tile)
        self.tile = new_tile
        return new_tile

    def fill(self, tile_type: TileType) -> Tile:
        """Fill the remaining sides of the candidate."""
        if self.tile.is_complete():
            raise TileFullError("Tile is full")
        if not self.rules.config(tile_type).fill:
            raise ValueError(f"Can't fill with {tile_type.value}.")
        new_tile = self.tile.fill(tile_type, rules=self.rules)
        self.history.append(self.tile)
        self.tile = new_tile
        return new_tile

    def clear(self) -> Tile:
        """Start over with an empty candidate."""
        self.history.append(self.tile)
        self.tile = Tile()
        return self.tile

    def rotate(self, delta: int) -> Tile:
        """Rotate one step; negative `delta` turns clockwise, positive counterclockwise."""
        if delta != 0:
            self.tile = self.tile.rotate(1 if delta < 0 else -1)
        return self.tile

    def undo(self) -> Tile:
        """Go back one build step (no-op without history)."""
        if self.history:
            self.tile = self.history.pop()
        return self.tile

    def replace(self, tile: Tile) -> None:
        """Start a new build session from `tile`."""
        self.tile = tile
        self.history.clear()
