"""Set up the data."""

from pathlib import Path

from pydantic_yaml import parse_yaml_file_as

from .models import GameRules, TileType

__all__ = ["data_path", "base_rules", "GameRules", "TileType"]

data_path = Path(__file__).parent

base_rules = parse_yaml_file_as(GameRules, data_path / "rules.yaml")
