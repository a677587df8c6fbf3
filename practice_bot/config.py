from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

PACKAGE_DIR = Path(__file__).parent


@dataclass
class ResultStoreConfig:
    backend: str = "file"
    file_path: Path = PACKAGE_DIR / "storage" / "results.jsonl"


@dataclass
class PracticeConfig:
    document_path: Path = PACKAGE_DIR / "data" / "sample_practice.json"
    seed: Optional[int] = None
    tick_interval: float = 1.0


@dataclass
class BotConfig:
    token: str
    practice: PracticeConfig = field(default_factory=PracticeConfig)
    result_store: ResultStoreConfig = field(default_factory=ResultStoreConfig)
    log_level: str = "INFO"


def _resolve(raw: str, base: Path) -> Path:
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = base / path
    return path


def load_config() -> BotConfig:
    load_dotenv()
    token = os.getenv("BOT_TOKEN", "")
    default_results = PACKAGE_DIR / "storage" / "results.jsonl"
    result_store = ResultStoreConfig(
        backend=os.getenv("RESULTS_BACKEND", "file").lower(),
        file_path=_resolve(os.getenv("RESULTS_PATH", str(default_results)), default_results.parent),
    )
    default_document = PACKAGE_DIR / "data" / "sample_practice.json"
    seed = os.getenv("PRACTICE_SEED")
    practice = PracticeConfig(
        document_path=_resolve(os.getenv("PRACTICE_PATH", str(default_document)), default_document.parent),
        seed=int(seed) if seed else None,
        tick_interval=float(os.getenv("TICK_INTERVAL", "1")),
    )
    return BotConfig(
        token=token,
        practice=practice,
        result_store=result_store,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
