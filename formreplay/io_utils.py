"""Filesystem helpers: data directory, run bookkeeping, and JSON documents."""

from __future__ import annotations

import json
import os
import re
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

DATA_DIR_ENV = "FORMREPLAY_DATA_DIR"
DEFAULT_DATA_DIR = Path("data")
RUNS_DIRNAME = "runs"

RECORD_ID_PATTERN = re.compile(r"^[0-9a-f]{24}$")


@dataclass(slots=True)
class RunPaths:
    """Directories belonging to one CLI invocation."""

    run_id: str
    command: str
    base_dir: Path

    @property
    def summary_path(self) -> Path:
        return self.base_dir / f"{self.command}.json"


def resolve_data_dir(override: Optional[str] = None) -> Path:
    """``--data-dir`` wins over the environment, which wins over ``./data``."""
    raw = override or os.environ.get(DATA_DIR_ENV)
    path = Path(raw) if raw else DEFAULT_DATA_DIR
    path.mkdir(parents=True, exist_ok=True)
    return path


def generate_run_id() -> str:
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    suffix = secrets.token_hex(2)
    return f"{timestamp}-{suffix}"


def generate_record_id() -> str:
    return secrets.token_hex(12)


def is_record_id(value: str) -> bool:
    return bool(RECORD_ID_PATTERN.match(value or ""))


def prepare_run_directories(data_dir: Path, run_id: str, command: str) -> RunPaths:
    base_dir = data_dir / RUNS_DIRNAME / run_id
    base_dir.mkdir(parents=True, exist_ok=True)
    return RunPaths(run_id=run_id, command=command, base_dir=base_dir)


def write_json(path: Path, payload: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, ensure_ascii=False)
    tmp_path.replace(path)
    return path


def read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")
