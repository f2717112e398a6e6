"""Bot entry point."""

import asyncio
import logging
from pathlib import Path

from aiogram import Bot, Dispatcher
from aiogram.fsm.storage.memory import MemoryStorage

from tile_planner.bot.game_logic import cmds, r_game

logger = logging.getLogger(__name__)

TOKEN_PATHS = (Path("/run/secrets/tg_token"), Path("secret/tg_token"))
"""Where to look for the bot token, in order (Docker secret first)."""


def read_token(paths: tuple[Path, ...] = TOKEN_PATHS) -> str:
    """Bot token from the first secrets file that exists."""
    for path in paths:
        if path.is_file():
            token = path.read_text(encoding="utf-8").strip()
            if token:
                logger.info(f"Using bot token from {path!s}")
                return token
            logger.warning(f"Token file {path!s} is empty, skipping.")
    raise FileNotFoundError(f"No bot token in any of: {[str(p) for p in paths]}")


async def async_main() -> None:
    """Run the bot until stopped."""
    dp = Dispatcher(storage=MemoryStorage())
    dp.include_router(r_game)

    # Replies are plain text, as tile names go straight into them
    bot = Bot(read_token())
    await bot.set_my_commands(list(cmds.values()))
    await dp.start_polling(bot)


def main():
    logging.basicConfig(level=logging.INFO)
    asyncio.run(async_main())


if __name__ == "__main__":
    main()
