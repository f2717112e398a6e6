"""Tests for the chat bot helpers (no network access)."""

from pathlib import Path

import pytest

from tile_planner.bot.game_logic import (
    GameBackend,
    TileActionCallback,
    board_png,
    describe_spots,
    describe_tile,
    help_text,
    make_tile_kb,
    parse_coordinate,
    parse_tile_type,
)
from tile_planner.data.models import TileType
from tile_planner.map.tiles import Tile
from tile_planner.state.engine import PlacementEngine

from conftest import C

T = TileType


class TestParsing:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("forest", T.Forest),
            ("Forest", T.Forest),
            (" TOWN ", T.Town),
            ("water station", T.WaterStation),
            ("WaterStation", T.WaterStation),
        ],
    )
    def test_tile_type(self, text: str, expected: TileType):
        assert parse_tile_type(text) == expected

    @pytest.mark.parametrize("text", ["", "unknown", "dragon"])
    def test_bad_tile_type(self, text: str):
        with pytest.raises(ValueError):
            parse_tile_type(text)

    @pytest.mark.parametrize(
        "text,expected",
        [("1 -2", C(1, -2)), ("3,4", C(3, 4)), (" -1 , 5 ", C(-1, 5)), ("0 0", C(0, 0))],
    )
    def test_coordinate(self, text: str, expected):
        assert parse_coordinate(text) == expected

    @pytest.mark.parametrize("text", [None, "", "1", "a b", "1 2 3", "1.5 2"])
    def test_bad_coordinate(self, text):
        with pytest.raises(ValueError):
            parse_coordinate(text)


class TestDescribe:
    def test_tile(self):
        assert describe_tile(Tile()) == "(empty)"
        tile = Tile(items=[T.Forest, T.WaterStation])
        assert describe_tile(tile) == "Forest / Water Station / ? / ? / ? / ?"

    def test_spots_incomplete(self, engine: PlacementEngine):
        assert "isn't complete" in describe_spots(engine)

    def test_spots(self, engine: PlacementEngine):
        engine.fill_tile(T.Grassland)
        lines = describe_spots(engine, n_spots=3).splitlines()
        assert len(lines) == 5
        assert lines[1] == "(1, -1): 1/1"
        assert lines[-1] == "Perfect spots by neighbors: 6x1"

    def test_spots_marked(self, engine: PlacementEngine):
        engine.add_mark(C(1, 0))
        engine.fill_tile(T.Grassland)
        assert "(1, 0): 1/1 *" in describe_spots(engine)

    def test_spots_nowhere(self, engine: PlacementEngine):
        engine.fill_tile(T.River)
        assert describe_spots(engine) == "The candidate doesn't fit anywhere."

    def test_help(self):
        text = help_text()
        assert "/place" in text
        assert "Grassland" in text
        assert "Unknown" not in text


class TestKeyboard:
    def test_buttons(self):
        markup = make_tile_kb().as_markup()
        buttons = [b for row in markup.inline_keyboard for b in row]
        assert len(buttons) == 15
        data = [TileActionCallback.unpack(b.callback_data) for b in buttons]
        assert data[0] == TileActionCallback(action="add", tile_type="Grassland")
        assert TileActionCallback(action="fill", tile_type="WaterStation") in data
        assert TileActionCallback(action="add", tile_type="WaterStation") not in data


class TestGameBackend:
    def test_new_game_saved(self, tmp_path: Path):
        backend = GameBackend(path_saves=tmp_path)
        engine = backend.get_game(42)
        assert backend.get_game(42) is engine
        assert len(engine.tiles()) == 1
        assert (tmp_path / "42.json").read_text() == engine.serialize()

    def test_game_reloaded(self, tmp_path: Path):
        engine = GameBackend(path_saves=tmp_path).get_game(7)
        engine.fill_tile(T.Forest)
        engine.add_candidate(C(1, 0))

        other = GameBackend(path_saves=tmp_path).get_game(7)
        assert other.has_tile(C(1, 0))
        assert other.serialize() == engine.serialize()

    def test_games_separate(self, tmp_path: Path):
        backend = GameBackend(path_saves=tmp_path)
        backend.get_game(1).add_mark(C(3, 3))
        assert backend.get_game(2).marks() == ()

    def test_status(self, tmp_path: Path):
        backend = GameBackend(path_saves=tmp_path)
        backend.get_game(1).add_tile(T.Town)
        status = backend.status(1)
        assert "Candidate: Town / ? / ? / ? / ? / ?" in status
        assert "Tiles on board: 1, marks: 0" in status


class TestBoardPng:
    def test_png(self, engine: PlacementEngine):
        engine.fill_tile(T.Field)
        png = board_png(engine)
        assert png.startswith(b"\x89PNG")
