"""Tiles, edges and placed items."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, field_validator

from tile_planner.data import base_rules
from tile_planner.data.models import GameRules, TileType
from .hexes import LogicalCoordinate

N_SIDES = 6


class TileFullError(ValueError):
    """Tried to add to a tile that has no free slot."""


class InvalidPositionError(IndexError):
    """Slot index outside of the hexagon."""


class Tile(BaseModel):
    """A hexagonal tile: one edge type per side, clockwise from direction 0.

    Unfilled sides hold `TileType.Unknown`.
    """

    model_config = {"frozen": True}

    items: tuple[TileType, ...] = (TileType.Unknown,) * N_SIDES

    @field_validator("items", mode="before")
    @classmethod
    def _pad_items(cls, v: Any) -> Any:
        """Truncate or pad items to exactly 6 slots."""
        if isinstance(v, (list, tuple)):
            v = list(v)[:N_SIDES]
            return tuple(v + [TileType.Unknown] * (N_SIDES - len(v)))
        return v

    @classmethod
    def single_tile(cls, tile_type: TileType) -> "Tile":
        """Tile with all sides of the same type."""
        return cls(items=(tile_type,) * N_SIDES)

    def get_item(self, idx: int) -> TileType:
        """Type at a side; anything out of range is `Unknown`."""
        if 0 <= idx < N_SIDES:
            return self.items[idx]
        return TileType.Unknown

    @property
    def filled(self) -> int:
        """Number of filled sides."""
        return sum(1 for it in self.items if it != TileType.Unknown)

    def is_empty(self) -> bool:
        return self.filled == 0

    def is_complete(self) -> bool:
        return self.filled == N_SIDES

    def add(self, tile_type: TileType, position: int | None = None) -> "Tile":
        """Set one side.

        By default the first unfilled side is used, otherwise `position`
        (which may overwrite an already filled side).
        """
        if self.is_complete():
            raise TileFullError("Tile is full")
        if position is None:
            position = self.items.index(TileType.Unknown)
        elif not 0 <= position < N_SIDES:
            raise InvalidPositionError(f"Invalid side position: {position}")
        items = list(self.items)
        items[position] = tile_type
        return Tile(items=items)

    def fill(self, tile_type: TileType, rules: GameRules = base_rules) -> "Tile":
        """Fill all unfilled sides with a type.

        Types that aren't 'normal' can't be mixed, so the whole tile becomes that type.
        """
        if not rules.is_normal(tile_type):
            return Tile.single_tile(tile_type)
        return Tile(
            items=[tile_type if it == TileType.Unknown else it for it in self.items]
        )

    def rotate(self, amount: int) -> "Tile":
        """Rotate clockwise by `amount` sides (negative for counterclockwise)."""
        return Tile(
            items=[self.items[(i - amount) % N_SIDES] for i in range(N_SIDES)]
        )

    def get_all_rotations(self) -> list["Tile"]:
        """All 6 rotations, the unrotated tile first."""
        return [self.rotate(i) for i in range(N_SIDES)]

    def serialize(self) -> list[str]:
        """Sides as a list of type names."""
        return [it.value for it in self.items]

    def __str__(self) -> str:
        return "/".join(it.value for it in self.items)


class Edge(BaseModel):
    """Match quality of a free cell next to placed tiles.

    `all` is the number of placed neighbors, `good` how many of them match.
    """

    model_config = {"frozen": True}

    all: int
    good: int

    def is_good(self) -> bool:
        return self.good == self.all


ItemType = TypeVar("ItemType")


class LogicalItem(BaseModel, Generic[ItemType]):
    """Something located at a cell."""

    model_config = {"frozen": True}

    coordinate: LogicalCoordinate
    item: ItemType
