"""Tests for hex grid geometry."""

from math import dist, sqrt

import pytest
from pydantic import ValidationError

from tile_planner.map.hexes import (
    LogicalCoordinate,
    PhysicalCoordinate,
    hex_vertices,
    logical_to_screen,
    opposite_direction,
    screen_to_logical,
    tile_map_key,
)

from conftest import C

ALL_CELLS = [C(x, y) for x in range(-6, 7) for y in range(-6, 7)]


class TestPhysicalCoordinate:
    def test_vector_ops(self):
        a = PhysicalCoordinate(x=10, y=20)
        b = PhysicalCoordinate(x=5, y=10)
        assert a + b == PhysicalCoordinate(x=15, y=30)
        assert a - b == PhysicalCoordinate(x=5, y=10)
        assert a * 0.5 == PhysicalCoordinate(x=5, y=10)
        assert a / 2 == PhysicalCoordinate(x=5, y=10)
        assert -b == PhysicalCoordinate(x=-5, y=-10)

    def test_immutable(self):
        a = PhysicalCoordinate(x=1, y=2)
        with pytest.raises(ValidationError):
            a.x = 3  # type: ignore

    def test_not_mixed_with_logical(self):
        with pytest.raises(TypeError):
            PhysicalCoordinate(x=1, y=2) + C(1, 2)  # type: ignore


class TestLogicalCoordinate:
    def test_value_equality(self):
        assert C(3, 4) == C(3, 4)
        assert C(3, 4) != C(4, 3)
        assert len({C(3, 4), C(3, 4)}) == 1

    @pytest.mark.parametrize(
        "coord,expected",
        [(C(0, 0), "0,0"), (C(1, -1), "1,-1"), (C(-5, 10), "-5,10")],
    )
    def test_key(self, coord: LogicalCoordinate, expected: str):
        assert tile_map_key(coord) == expected

    def test_neighbors_even_row(self):
        assert C(0, 0).neighbors == [
            C(1, -1),
            C(1, 0),
            C(1, 1),
            C(0, 1),
            C(-1, 0),
            C(0, -1),
        ]

    def test_neighbors_odd_row(self):
        assert C(0, 1).neighbors == [
            C(0, 0),
            C(1, 1),
            C(0, 2),
            C(-1, 2),
            C(-1, 1),
            C(-1, 0),
        ]

    def test_neighbors_negative_odd_row(self):
        assert C(0, -1).neighbors == [
            C(0, -2),
            C(1, -1),
            C(0, 0),
            C(-1, 0),
            C(-1, -1),
            C(-1, -2),
        ]

    @pytest.mark.parametrize("coord", ALL_CELLS[::7])
    def test_neighbors_see_back(self, coord: LogicalCoordinate):
        """Going in direction `i`, then in the opposite direction, comes back."""
        for i, nb in enumerate(coord.neighbors):
            assert nb.neighbors[opposite_direction(i)] == coord

    @pytest.mark.parametrize("coord", ALL_CELLS[::5])
    def test_neighbors_unique(self, coord: LogicalCoordinate):
        nbs = coord.neighbors
        assert len(set(nbs)) == 6
        assert coord not in nbs


class TestDirections:
    @pytest.mark.parametrize("d,expected", [(0, 3), (1, 4), (2, 5), (3, 0), (4, 1), (5, 2)])
    def test_opposite(self, d: int, expected: int):
        assert opposite_direction(d) == expected

    @pytest.mark.parametrize("d", range(6))
    def test_opposite_involution(self, d: int):
        assert opposite_direction(opposite_direction(d)) == d


class TestLogicalToScreen:
    @pytest.mark.parametrize(
        "coord,x,y",
        [
            (C(0, 0), 0.0, 0.0),
            (C(1, 0), sqrt(3), 0.0),
            (C(0, 1), -sqrt(3) / 2, 1.5),
            (C(1, 1), sqrt(3) / 2, 1.5),
            (C(0, 2), 0.0, 3.0),
            (C(0, -1), -sqrt(3) / 2, -1.5),
        ],
    )
    def test_known_points(self, coord: LogicalCoordinate, x: float, y: float):
        p = logical_to_screen(coord)
        assert p.x == pytest.approx(x)
        assert p.y == pytest.approx(y)

    @pytest.mark.parametrize("coord", ALL_CELLS[::3])
    def test_neighbors_one_hex_apart(self, coord: LogicalCoordinate):
        p = logical_to_screen(coord)
        for nb in coord.neighbors:
            q = logical_to_screen(nb)
            assert dist((p.x, p.y), (q.x, q.y)) == pytest.approx(sqrt(3))

    def test_directions_go_clockwise(self):
        """Direction 0 is the upper right, the rest follow clockwise."""
        center = logical_to_screen(C(2, 2))
        deltas = [logical_to_screen(nb) - center for nb in C(2, 2).neighbors]
        signs = [(d.x > 0, d.y) for d in deltas]
        assert signs[0][0] and signs[0][1] < 0
        assert signs[1] == (True, 0.0)
        assert signs[2][0] and signs[2][1] > 0
        assert not signs[3][0] and signs[3][1] > 0
        assert signs[4] == (False, 0.0)
        assert not signs[5][0] and signs[5][1] < 0


class TestScreenToLogical:
    @pytest.mark.parametrize("coord", ALL_CELLS)
    def test_round_trip(self, coord: LogicalCoordinate):
        assert screen_to_logical(logical_to_screen(coord)) == coord

    @pytest.mark.parametrize(
        "point,expected",
        [
            ((0.5, 0.5), C(0, 0)),
            ((1.0, 0.5), C(1, 0)),
            ((-0.5, 0.5), C(0, 0)),
            ((-1.0, 0.5), C(-1, 0)),
            ((0.0, -0.2), C(0, 0)),
            ((0.0, -0.9), C(0, 0)),  # near the top vertex
            ((0.0, 0.9), C(0, 0)),  # near the bottom vertex
            ((0.8, 0.55), C(1, 1)),  # just outside the lower right side
            ((-0.8, 0.55), C(0, 1)),  # just outside the lower left side
            ((0.8, -0.55), C(1, -1)),  # just outside the upper right side
            ((0.0, 2.3), C(0, 2)),
            ((0.0, 2.9), C(0, 2)),
        ],
    )
    def test_points(self, point: tuple[float, float], expected: LogicalCoordinate):
        assert screen_to_logical(PhysicalCoordinate(x=point[0], y=point[1])) == expected

    @pytest.mark.parametrize("coord", ALL_CELLS[::4])
    def test_points_inside_hexagon(self, coord: LogicalCoordinate):
        """Points slightly inside each corner still belong to the cell."""
        center = logical_to_screen(coord)
        for v in hex_vertices(center, 0.95):
            assert screen_to_logical(v) == coord

    def test_vertical_edge_tie_goes_right(self):
        edge = PhysicalCoordinate(x=sqrt(3) / 2, y=0.0)
        assert screen_to_logical(edge) == C(1, 0)
