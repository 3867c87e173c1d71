# doc_distiller/logs.py
from __future__ import annotations

import datetime as _dt
import os
from pathlib import Path
from typing import Callable, Optional

from .config import clean_env

LogFn = Callable[[str], None]


def _log_sink() -> Optional[Path]:
    p = clean_env(os.getenv("DISTILLER_LOG_FILE")) or ""
    if not p:
        return None
    path = Path(p)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def _emit(line: str) -> None:
    ts = _dt.datetime.now(_dt.timezone.utc).isoformat(timespec="seconds")
    msg = f"[{ts}] {line}"
    if os.getenv("DISTILLER_DEBUG", "0") == "1":
        print(msg, flush=True)
    dest = _log_sink()
    if dest:
        with dest.open("a", encoding="utf-8") as f:
            f.write(msg + "\n")


def log(line: str, logger: Optional[LogFn] = None) -> None:
    """
    Write one tagged line to the log sink and, if given, to a UI callback.

    A failing callback must not break the run it is reporting on.
    """
    if logger:
        try:
            logger(line)
        except Exception as e:
            _emit(f"[log:err] ui logger raised {e!r}")
    _emit(line)
