from __future__ import annotations

import logging
from typing import Iterator

import pytest

from leanerr.errors import logging as leanerr_logging
from leanerr.trace import renderer as renderer_module


@pytest.fixture(autouse=True)
def _reset_process_state(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    # Process-wide renderer and log sink are write-once / global.
    monkeypatch.setattr(renderer_module, "_process_renderer", None)
    monkeypatch.setattr(leanerr_logging, "_sink", leanerr_logging._default_sink)
    for name in ("HIDE_INTERNAL", "META_INDENT", "FRAME_SEPARATOR", "CHAIN_SEPARATOR", "MAX_CHAIN_DEPTH", "LOG_DIR", "RUN_ID"):
        monkeypatch.delenv(f"LEANERR_{name}", raising=False)

    yield

    logger = logging.getLogger(leanerr_logging.LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.filters.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
