# src/tasktracker/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs exactly one command:
load all tasks -> mutate in memory -> save all tasks -> exit.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence

from ..cli.bootstrap import create_initial_state
from ..cli.commands import registry
from ..config import get_settings
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None, *, settings=None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    if settings is None:
        settings = get_settings()

    # choose console log level from settings.log_level
    level_name = str(getattr(settings, "log_level", "WARNING")).upper()
    console_level = logging.getLevelNamesMapping().get(level_name, logging.WARNING)
    setup_logging(console_level=console_level, log_file=getattr(settings, "log_file", None))

    logger.debug("Starting %s argv=%s", getattr(settings, "app_name", "task-tracker"), list(argv))

    state = create_initial_state(settings=settings)
    result = registry.handle(state, list(argv))

    if result.text:
        print(result.text, file=sys.stdout if result.ok else sys.stderr)
    return int(result.code)


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
