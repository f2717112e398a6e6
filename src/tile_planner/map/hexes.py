"""Hexagonal grid definition.

Cells use 'offset' coordinates with pointy-top hexes: every odd row is
shifted half a hex to the left, so the neighbor offsets depend on the row.

https://www.redblobgames.com/grids/hexagons/#coordinates-offset
"""

from math import floor, sqrt

from pydantic import BaseModel

SQRT3 = sqrt(3)
SQRT3_HALF = SQRT3 / 2

ROW_HEIGHT = 1.5
"""Vertical distance between the centers of two rows (unit circumradius)."""


class PhysicalCoordinate(BaseModel):
    """Point in continuous 2D space (screen or hex-unit plane)."""

    model_config = {"frozen": True, "allow_inf_nan": False}

    x: float
    y: float

    # Vector operations

    def __add__(self, rhs: "PhysicalCoordinate") -> "PhysicalCoordinate":
        if isinstance(rhs, PhysicalCoordinate):
            return PhysicalCoordinate(x=self.x + rhs.x, y=self.y + rhs.y)
        return NotImplemented

    def __sub__(self, rhs: "PhysicalCoordinate") -> "PhysicalCoordinate":
        if isinstance(rhs, PhysicalCoordinate):
            return PhysicalCoordinate(x=self.x - rhs.x, y=self.y - rhs.y)
        return NotImplemented

    def __mul__(self, value: float) -> "PhysicalCoordinate":
        if isinstance(value, (int, float)):
            return PhysicalCoordinate(x=self.x * value, y=self.y * value)
        return NotImplemented

    def __truediv__(self, value: float) -> "PhysicalCoordinate":
        if isinstance(value, (int, float)):
            return PhysicalCoordinate(x=self.x / value, y=self.y / value)
        return NotImplemented

    def __neg__(self) -> "PhysicalCoordinate":
        return PhysicalCoordinate(x=-self.x, y=-self.y)


class LogicalCoordinate(BaseModel):
    """Hex cell address in the staggered grid."""

    model_config = {"frozen": True}

    x: int
    y: int

    @property
    def key(self) -> str:
        """Stable string key of this cell."""
        return f"{self.x},{self.y}"

    @property
    def neighbors(self) -> list["LogicalCoordinate"]:
        """Get direct neighbors of this cell, clockwise from the upper right.

        The index of a neighbor in this list is the direction to reach it.
        """
        offsets = NEIGHBORS_EVEN if self.y % 2 == 0 else NEIGHBORS_ODD
        return [LogicalCoordinate(x=self.x + dx, y=self.y + dy) for dx, dy in offsets]

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


NEIGHBORS_EVEN: tuple[tuple[int, int], ...] = (
    (1, -1),
    (1, 0),
    (1, 1),
    (0, 1),
    (-1, 0),
    (0, -1),
)
"""Neighbor offsets for cells in even rows."""

NEIGHBORS_ODD: tuple[tuple[int, int], ...] = (
    (0, -1),
    (1, 0),
    (0, 1),
    (-1, 1),
    (-1, 0),
    (-1, -1),
)
"""Neighbor offsets for cells in odd rows."""


def tile_map_key(coord: LogicalCoordinate) -> str:
    """Key of a cell, used to index the board."""
    return coord.key


def opposite_direction(direction: int) -> int:
    """Direction in which a neighbor sees the original cell."""
    return (direction + 3) % 6


def logical_to_screen(coord: LogicalCoordinate) -> PhysicalCoordinate:
    """Center of a cell, in units of hex circumradius."""
    return PhysicalCoordinate(
        x=(coord.x * 2 - abs(coord.y) % 2) * SQRT3_HALF,
        y=coord.y * ROW_HEIGHT,
    )


def screen_to_logical(point: PhysicalCoordinate) -> LogicalCoordinate:
    """Find the cell whose hexagon contains a point.

    The plane is cut in bands of one row height. The upper part of each band
    (height 1) is covered by the straight sides of that row's hexagons, so a
    plain column lookup is enough. The lower part (height 0.5) is the zigzag
    between the row and the next one, resolved by testing against the two
    slanted edges of the hexagon bottom.

    Ties: a point on a vertical edge belongs to the right cell, a point on a
    slanted edge belongs to the cell of the next row.
    """
    y_adjusted = point.y + 0.5
    y = floor(y_adjusted / ROW_HEIGHT)
    within_y = y_adjusted - y * ROW_HEIGHT

    even = y % 2 == 0
    x_adjusted = point.x + (SQRT3_HALF if even else SQRT3)
    x = floor(x_adjusted / SQRT3)
    if within_y <= 1:
        return LogicalCoordinate(x=x, y=y)

    within_x = x_adjusted - x * SQRT3
    below = within_y - 1
    if within_x <= SQRT3_HALF:
        # Lower left slanted edge
        if within_x > below * SQRT3:
            return LogicalCoordinate(x=x, y=y)
        return LogicalCoordinate(x=x if even else x - 1, y=y + 1)
    # Lower right slanted edge
    if within_x - SQRT3_HALF + below * SQRT3 < SQRT3_HALF:
        return LogicalCoordinate(x=x, y=y)
    return LogicalCoordinate(x=x + 1 if even else x, y=y + 1)


def hex_vertices(center: PhysicalCoordinate, radius: float) -> list[PhysicalCoordinate]:
    """Corners of a hexagon, clockwise from the top.

    Side `i` (between corners `i` and `i + 1`) faces the neighbor in direction `i`.
    """
    return [center + v * radius for v in HEX_UNIT_VERTICES]


HEX_UNIT_VERTICES = (
    PhysicalCoordinate(x=0, y=-1),
    PhysicalCoordinate(x=SQRT3_HALF, y=-0.5),
    PhysicalCoordinate(x=SQRT3_HALF, y=0.5),
    PhysicalCoordinate(x=0, y=1),
    PhysicalCoordinate(x=-SQRT3_HALF, y=0.5),
    PhysicalCoordinate(x=-SQRT3_HALF, y=-0.5),
)
"""Corners of a unit hexagon (pointy top)."""
