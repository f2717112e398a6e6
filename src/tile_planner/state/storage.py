"""Where saved games are kept."""

import logging
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class GameStorage(Protocol):
    """Loads and saves the serialized game."""

    def load_string(self) -> str | None:
        """Get the saved game, or None if there is none."""

    def save_string(self, data: str) -> None:
        """Replace the saved game."""


class MemoryStorage(object):
    """Keeps the saved game in memory."""

    def __init__(self, data: str | None = None):
        self.data = data
        self.n_saves = 0

    def load_string(self) -> str | None:
        return self.data

    def save_string(self, data: str) -> None:
        self.data = data
        self.n_saves += 1


class FileStorage(object):
    """Keeps the saved game in a JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load_string(self) -> str | None:
        if not self.path.exists():
            return None
        try:
            return self.path.read_text(encoding="utf-8")
        except UnicodeDecodeError as err:
            logger.warning(f"Can't decode saved game {self.path!s}: {err}")
            return None

    def save_string(self, data: str) -> None:
        self.path.parent.mkdir(exist_ok=True, parents=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(data, encoding="utf-8")
        tmp_path.replace(self.path)
        logger.debug(f"Saved game to {self.path!s}")
