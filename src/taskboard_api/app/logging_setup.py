from __future__ import annotations

import logging
import sys

_HANDLER_NAME = "taskboard-console"


class _ThirdPartyNoiseFilter(logging.Filter):
    """Keep taskboard_api logs; let other libraries through only at WARNING+."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("taskboard_api"):
            return True
        return record.levelno >= logging.WARNING


def setup_logging(level: str | int = logging.INFO) -> None:
    """
    Attach one stderr handler to the root logger.

    Safe to call more than once: the handler is added only the first time,
    later calls just adjust the level. Handlers installed by others (pytest,
    uvicorn) are left alone.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    handler = next((h for h in root.handlers if h.get_name() == _HANDLER_NAME), None)
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        handler.addFilter(_ThirdPartyNoiseFilter())
        root.addHandler(handler)

    handler.setLevel(level)
    logging.getLogger("taskboard_api").setLevel(level)
