"""Saved game format.

```
{
  "offset": {"x": 400.0, "y": 300.0},
  "zoomLevel": 0,
  "tiles": [{"coordinate": {"x": 0, "y": 0}, "item": ["Grassland", ...]}],
  "marks": [{"x": 1, "y": 0}]
}
```
"""

from typing import Any

from typing_extensions import Annotated
from pydantic import BaseModel, Field, ValidationError, model_validator

from tile_planner.data.models import TileType
from tile_planner.map.hexes import LogicalCoordinate, PhysicalCoordinate
from tile_planner.map.tiles import N_SIDES, LogicalItem, Tile
from tile_planner.map.view import (
    MAX_ZOOM_LEVEL,
    MIN_ZOOM_LEVEL,
    DisplayPosition,
    zoom_to_level,
)


class GameDataError(ValueError):
    """Saved game data can't be loaded."""


class SavedTile(BaseModel):
    """A placed tile in the saved game."""

    coordinate: LogicalCoordinate
    item: Annotated[list[TileType], Field(min_length=N_SIDES, max_length=N_SIDES)]

    @model_validator(mode="after")
    def _check_complete(self) -> "SavedTile":
        """Placed tiles never have unfilled sides."""
        if TileType.Unknown in self.item:
            raise ValueError(f"Placed tile at {self.coordinate} is incomplete.")
        return self


class SavedGame(BaseModel):
    """The whole saved game."""

    model_config = {"populate_by_name": True}

    offset: PhysicalCoordinate
    zoom_level: Annotated[
        int, Field(alias="zoomLevel", ge=MIN_ZOOM_LEVEL, le=MAX_ZOOM_LEVEL)
    ] = 0
    tiles: list[SavedTile]
    marks: list[LogicalCoordinate] = []

    @model_validator(mode="before")
    @classmethod
    def _convert_legacy_zoom(cls, data: Any) -> Any:
        """Old saves have a raw 'zoom' factor instead of 'zoomLevel'."""
        if isinstance(data, dict) and "zoomLevel" not in data and "zoom" in data:
            zoom = data["zoom"]
            if isinstance(zoom, bool) or not isinstance(zoom, (int, float)):
                raise ValueError(f"Bad legacy zoom value: {zoom!r}")
            data = {k: v for k, v in data.items() if k != "zoom"}
            data["zoomLevel"] = zoom_to_level(zoom)
        return data

    @model_validator(mode="after")
    def _check_unique(self) -> "SavedGame":
        """At most one tile per cell."""
        keys = [st.coordinate.key for st in self.tiles]
        if len(keys) != len(set(keys)):
            raise ValueError("Multiple tiles at the same coordinate.")
        return self

    @property
    def display_position(self) -> DisplayPosition:
        return DisplayPosition(offset=self.offset, zoom_level=self.zoom_level)

    def placed_tiles(self) -> list[LogicalItem[Tile]]:
        return [
            LogicalItem[Tile](coordinate=st.coordinate, item=Tile(items=st.item))
            for st in self.tiles
        ]


def serialize_game(
    tiles: list[LogicalItem[Tile]],
    marks: list[LogicalCoordinate],
    display_position: DisplayPosition,
) -> str:
    """Serialize a game to a JSON string."""
    saved = SavedGame(
        offset=display_position.offset,
        zoom_level=display_position.zoom_level,
        tiles=[
            SavedTile(coordinate=li.coordinate, item=list(li.item.items))
            for li in tiles
        ],
        marks=list(marks),
    )
    return saved.model_dump_json(by_alias=True)


def deserialize_game(data: str) -> SavedGame:
    """Parse and validate a saved game.

    Raises `GameDataError` on anything that isn't a valid game.
    """
    if not isinstance(data, (str, bytes)):
        raise GameDataError(f"Saved game must be a string, got: {type(data)}")
    try:
        # Strict: no strings for numbers, no floats for cells
        return SavedGame.model_validate_json(data, strict=True)
    except ValidationError as err:
        raise GameDataError(f"Invalid saved game: {err}") from err
