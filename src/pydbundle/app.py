from __future__ import annotations

import logging
import sys
from typing import List, Optional

from pydbundle.core.handlers.build_handler import build_help_text, handle_build
from pydbundle.core.managers.config_manager import config_manager
from pydbundle.core.utils.configure_logging import configure_logger

logger = logging.getLogger(__name__)

USAGE = f"""
Usage: pydbundle [-v|-q] <command> [args]

Commands:
{build_help_text}
""".strip()

COMMANDS = {"build": handle_build}


def _init_logging(argv: List[str]) -> List[str]:
    """Consumes -v/-q and configures logging from settings.json."""
    level = config_manager.get_nested("debug.level", "INFO")
    rest = []
    for arg in argv:
        if arg in ("-v", "--verbose"):
            level = "DEBUG"
        elif arg in ("-q", "--quiet"):
            level = "WARNING"
        else:
            rest.append(arg)
    configure_logger(
        level,
        module_specific_levels=config_manager.get_nested("logging.module_levels"),
        silenced_loggers=config_manager.get_nested("logging.silenced_loggers"),
    )
    return rest


def main(argv: Optional[List[str]] = None) -> int:
    args = _init_logging(list(sys.argv[1:] if argv is None else argv))
    if not args or args[0] in ("-h", "--help", "help"):
        print(USAGE)
        return 0 if args else 1

    handler = COMMANDS.get(args[0])
    if handler is None:
        print(f"Unknown command: {args[0]}")
        print(USAGE)
        return 1

    logger.debug("Dispatching '%s' with %s", args[0], args[1:])
    return handler(args[1:])


if __name__ == "__main__":
    sys.exit(main())
