"""Data models."""

from enum import Enum

from pydantic import BaseModel, model_validator


class TileType(str, Enum):
    """Type of a single edge segment of a tile."""

    Unknown = "Unknown"  # unfilled slot
    Grassland = "Grassland"
    Forest = "Forest"
    Field = "Field"
    Town = "Town"
    River = "River"
    Lake = "Lake"
    Railway = "Railway"
    WaterStation = "WaterStation"


class TileConfig(BaseModel):
    """Configuration of a tile type."""

    display_name: str
    normal: bool = True
    fill: bool = True
    color: str = "#aaaaaa"


class MatchPair(BaseModel):
    """Two different tile types that are allowed to touch."""

    a: TileType
    b: TileType

    def covers(self, lhs: TileType, rhs: TileType) -> bool:
        """Check whether this pair matches `lhs` and `rhs` (in any order)."""
        return (self.a == lhs and self.b == rhs) or (self.a == rhs and self.b == lhs)


class GameRules(BaseModel):
    """Tile types and matching rules."""

    tile_types: dict[TileType, TileConfig]
    match_pairs: list[MatchPair] = []
    exclusive: list[TileType] = []

    def config(self, tile_type: TileType) -> TileConfig:
        """Get the config of some tile type."""
        return self.tile_types[tile_type]

    def is_normal(self, tile_type: TileType) -> bool:
        """Whether the type is built edge-by-edge."""
        return self.tile_types[tile_type].normal

    @property
    def fill_types(self) -> list[TileType]:
        """Types that may be used to fill a tile."""
        return [tt for tt, cfg in self.tile_types.items() if cfg.fill]

    @property
    def normal_types(self) -> list[TileType]:
        """Types that may be added edge by edge."""
        return [tt for tt, cfg in self.tile_types.items() if cfg.normal]

    def does_match(self, lhs: TileType, rhs: TileType) -> bool:
        """Check if two touching edges match."""
        return lhs == rhs or any(mp.covers(lhs, rhs) for mp in self.match_pairs)

    def is_exclusive(self, tile_type: TileType) -> bool:
        """Whether a mismatch against this type blocks the placement."""
        return tile_type in self.exclusive

    @model_validator(mode="after")
    def _check_table(self) -> "GameRules":
        """Ensure the rule table is complete and consistent."""
        missing = set(TileType) - set(self.tile_types)
        if missing:
            names = sorted(tt.value for tt in missing)
            raise ValueError(f"Missing tile type configs: {names}")
        unknown = self.tile_types[TileType.Unknown]
        if unknown.normal or unknown.fill:
            raise ValueError("Unknown tile type can't be normal or used to fill.")
        for mp in self.match_pairs:
            if TileType.Unknown in (mp.a, mp.b):
                raise ValueError(f"Match pair can't reference Unknown: {mp!r}")
        if TileType.Unknown in self.exclusive:
            raise ValueError("Unknown tile type can't be exclusive.")
        return self
