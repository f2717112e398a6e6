"""Board rendering."""

from PIL.Image import Image
from PIL.Image import new as img_new
from PIL.ImageDraw import Draw
from PIL.ImageFont import load_default

from tile_planner.data import base_rules
from tile_planner.data.models import GameRules
from .hexes import (
    SQRT3_HALF,
    LogicalCoordinate,
    PhysicalCoordinate,
    hex_vertices,
    logical_to_screen,
)
from .tiles import Edge, LogicalItem, Tile

XY = tuple[float, float]

GOOD_EDGE_COLORS = [
    "#000000",
    "#000000",
    "#330000",
    "#660000",
    "#990000",
    "#cc0000",
    "#ff0000",
]
"""Outline of perfectly matching cells, by number of placed neighbors."""
BAD_EDGE_COLOR = "#999999"
MARK_COLOR = "#ffaaaa"
MARKED_GOOD_COLOR = "#ff22aa"
MARKED_BAD_COLOR = "#ffff00"


def _xy(points: list[PhysicalCoordinate]) -> list[XY]:
    return [(p.x, p.y) for p in points]


class BoardImage(object):
    """Draws tiles, free cells and marks onto an image.

    Physical coordinates are scaled by `radius` and shifted so the whole board
    fits in the image with `margin` pixels to spare.
    """

    def __init__(
        self,
        cells: list[LogicalCoordinate],
        radius: float = 40.0,
        margin: int = 10,
        rules: GameRules = base_rules,
    ):
        if len(cells) == 0:
            raise ValueError("No cells - can't make an image.")
        self.radius = radius
        self.rules = rules

        centers = [logical_to_screen(c) * radius for c in cells]
        half_w = radius * SQRT3_HALF
        min_x = min(c.x for c in centers) - half_w
        max_x = max(c.x for c in centers) + half_w
        min_y = min(c.y for c in centers) - radius
        max_y = max(c.y for c in centers) + radius

        self.origin = PhysicalCoordinate(x=margin - min_x, y=margin - min_y)
        size = (int(max_x - min_x) + 2 * margin, int(max_y - min_y) + 2 * margin)
        self.image = img_new(mode="RGBA", size=size, color=(255, 255, 255, 255))
        self.draw = Draw(self.image)
        self.font = load_default()

    def center(self, coord: LogicalCoordinate) -> PhysicalCoordinate:
        """Pixel position of a cell center."""
        return logical_to_screen(coord) * self.radius + self.origin

    def draw_tile(self, coord: LogicalCoordinate, tile: Tile) -> None:
        """One colored triangle per side."""
        center = self.center(coord)
        vertices = hex_vertices(center, self.radius)
        for i in range(6):
            color = self.rules.config(tile.get_item(i)).color
            triangle = [center, vertices[i], vertices[(i + 1) % 6]]
            self.draw.polygon(_xy(triangle), fill=color)
        self.draw.polygon(_xy(vertices), outline="#000000", width=1)

    def draw_mark(self, coord: LogicalCoordinate) -> None:
        vertices = hex_vertices(self.center(coord), self.radius)
        self.draw.polygon(_xy(vertices), fill=MARK_COLOR)

    def draw_edge(self, coord: LogicalCoordinate, edge: Edge, marked: bool) -> None:
        """Outline a free cell, labelled with its match quality."""
        center = self.center(coord)
        if marked:
            color = MARKED_GOOD_COLOR if edge.is_good() else MARKED_BAD_COLOR
        elif edge.is_good():
            color = GOOD_EDGE_COLORS[min(edge.all, len(GOOD_EDGE_COLORS) - 1)]
        else:
            color = BAD_EDGE_COLOR
        width = max(2, int(self.radius / 10))
        vertices = hex_vertices(center, self.radius * 0.9)
        self.draw.polygon(_xy(vertices), outline=color, width=width)
        label = f"{edge.all}" if edge.is_good() else f"{edge.good}/{edge.all}"
        left, top, right, bottom = self.draw.textbbox((0, 0), label, font=self.font)
        pos = (center.x - (right - left) / 2, center.y - (bottom - top) / 2)
        self.draw.text(pos, label, fill=color, font=self.font)


def render_board(
    tiles: list[LogicalItem[Tile]],
    edges: list[LogicalItem[Edge]] | None = None,
    marks: list[LogicalCoordinate] | None = None,
    *,
    radius: float = 40.0,
    rules: GameRules = base_rules,
) -> Image:
    """Make a single image of the board."""
    edges = edges or []
    marks = marks or []
    cells = [li.coordinate for li in tiles] + [li.coordinate for li in edges] + list(marks)
    board = BoardImage(cells, radius=radius, rules=rules)
    mark_keys = {m.key for m in marks}
    for mark in marks:
        board.draw_mark(mark)
    for placed in tiles:
        board.draw_tile(placed.coordinate, placed.item)
    for edge in edges:
        board.draw_edge(edge.coordinate, edge.item, edge.coordinate.key in mark_keys)
    return board.image
