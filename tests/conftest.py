"""Shared fixtures."""

import pytest

from tile_planner.map.hexes import LogicalCoordinate, PhysicalCoordinate
from tile_planner.state.engine import PlacementEngine
from tile_planner.state.storage import MemoryStorage


def C(x: int, y: int) -> LogicalCoordinate:
    """Short-hand cell."""
    return LogicalCoordinate(x=x, y=y)


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def engine(storage: MemoryStorage) -> PlacementEngine:
    """Fresh game: a single grassland tile at (0, 0)."""
    eng = PlacementEngine(storage=storage)
    eng.set_window_size(PhysicalCoordinate(x=800, y=600))
    eng.init()
    return eng
