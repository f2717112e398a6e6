"""Pan and zoom state of the board view."""

from math import isfinite, log

from typing_extensions import Annotated
from pydantic import BaseModel, Field

from .hexes import PhysicalCoordinate

BASE_ZOOM = 50.0
"""Pixels per hex radius at zoom level 0."""

ZOOM_STEP = 1.25
"""Zoom multiplier of a single zoom level."""

MIN_ZOOM_LEVEL = -8
MAX_ZOOM_LEVEL = 8


def clamp_zoom_level(level: int) -> int:
    """Keep a zoom level within the allowed range."""
    return max(MIN_ZOOM_LEVEL, min(MAX_ZOOM_LEVEL, level))


def zoom_to_level(zoom: float) -> int:
    """Nearest zoom level of a raw zoom factor (old save files store those)."""
    if not isfinite(zoom) or zoom <= 0:
        raise ValueError(f"Zoom must be a positive number, got: {zoom}")
    return clamp_zoom_level(round(log(zoom / BASE_ZOOM) / log(ZOOM_STEP)))


class DisplayPosition(BaseModel):
    """Maps hex-unit (physical) points to screen pixels and back.

    `screen = physical * zoom + offset`, so `offset` is where the center of
    cell (0, 0) appears on screen.
    """

    model_config = {"frozen": True}

    offset: PhysicalCoordinate = PhysicalCoordinate(x=0, y=0)
    zoom_level: Annotated[
        int, Field(ge=MIN_ZOOM_LEVEL, le=MAX_ZOOM_LEVEL)
    ] = 0

    @property
    def zoom(self) -> float:
        """Pixels per hex radius."""
        return BASE_ZOOM * ZOOM_STEP**self.zoom_level

    @classmethod
    def centered(cls, size: PhysicalCoordinate) -> "DisplayPosition":
        """View with cell (0, 0) in the middle of a viewport of the given size."""
        return cls(offset=size / 2, zoom_level=0)

    def to_screen(self, physical: PhysicalCoordinate) -> PhysicalCoordinate:
        return physical * self.zoom + self.offset

    def to_physical(self, screen: PhysicalCoordinate) -> PhysicalCoordinate:
        return (screen - self.offset) / self.zoom

    def pan(
        self, origin: PhysicalCoordinate, position: PhysicalCoordinate
    ) -> "DisplayPosition":
        """Move the view by dragging from `origin` to `position` (screen)."""
        return DisplayPosition(
            offset=self.offset + (position - origin), zoom_level=self.zoom_level
        )

    def zoom_by(self, position: PhysicalCoordinate, steps: int) -> "DisplayPosition":
        """Change the zoom level, keeping the point under `position` in place."""
        level = clamp_zoom_level(self.zoom_level + steps)
        if level == self.zoom_level:
            return self
        anchor = self.to_physical(position)
        new_zoom = BASE_ZOOM * ZOOM_STEP**level
        return DisplayPosition(offset=position - anchor * new_zoom, zoom_level=level)
