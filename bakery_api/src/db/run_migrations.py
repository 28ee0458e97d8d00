"""
Run Alembic against the bakery schema without an alembic.ini.

    python -m src.db.run_migrations upgrade head
    python -m src.db.run_migrations downgrade -1
    python -m src.db.run_migrations revision -m "add column" --autogenerate
"""

import logging
import sys
from pathlib import Path
from typing import Callable, Dict, List

from alembic import command
from alembic.config import Config

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


# PUBLIC_INTERFACE
def build_config() -> Config:
    """Alembic config pointing at the packaged migrations and the configured database."""
    from src.db.config import get_settings

    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    # env.py switches to the async URL for online runs.
    cfg.set_main_option("sqlalchemy.url", get_settings().sync_database_url)
    return cfg


def _revision(cfg: Config, args: List[str]) -> None:
    message = None
    autogenerate = "--autogenerate" in args
    if "-m" in args and args.index("-m") + 1 < len(args):
        message = args[args.index("-m") + 1]
    command.revision(cfg, message=message, autogenerate=autogenerate)


COMMANDS: Dict[str, Callable[[Config, List[str]], None]] = {
    "upgrade": lambda cfg, args: command.upgrade(cfg, args[0] if args else "head"),
    "downgrade": lambda cfg, args: command.downgrade(cfg, args[0] if args else "-1"),
    "current": lambda cfg, args: command.current(cfg, verbose="-v" in args),
    "history": lambda cfg, args: command.history(cfg, verbose="-v" in args),
    "heads": lambda cfg, args: command.heads(cfg),
    "stamp": lambda cfg, args: command.stamp(cfg, args[0] if args else "head"),
    "revision": _revision,
}


# PUBLIC_INTERFACE
def main(argv: List[str] | None = None) -> None:
    """Dispatch an Alembic command such as ['upgrade', 'head']."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args or args[0] not in COMMANDS:
        print(f"Usage: python -m src.db.run_migrations <{'|'.join(COMMANDS)}> [args]")
        sys.exit(2)

    name, rest = args[0], args[1:]
    logger.info("alembic %s %s", name, " ".join(rest))
    COMMANDS[name](build_config(), rest)


if __name__ == "__main__":
    main()
