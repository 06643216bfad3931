from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from typing import Mapping

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class MatchingThresholds:
    relaxed_below: int = 50
    fallback_min_confidence: int = 40
    partial_confidence: int = 45
    partial_length_ratio: float = 0.6
    relaxed_partial_floor: int = 60


DEFAULT_THRESHOLDS = MatchingThresholds()

_THRESHOLD_ENV = {
    "relaxed_below": "SUBJECT_MATCH_RELAXED_BELOW",
    "fallback_min_confidence": "SUBJECT_MATCH_FALLBACK_MIN_CONFIDENCE",
    "partial_confidence": "SUBJECT_MATCH_PARTIAL_CONFIDENCE",
    "partial_length_ratio": "SUBJECT_MATCH_PARTIAL_LENGTH_RATIO",
    "relaxed_partial_floor": "SUBJECT_MATCH_RELAXED_PARTIAL_FLOOR",
}


def load_thresholds(env: Mapping[str, str] | None = None) -> MatchingThresholds:
    source = os.environ if env is None else env
    values: dict[str, int | float] = {}
    for item in fields(MatchingThresholds):
        raw = (source.get(_THRESHOLD_ENV[item.name]) or "").strip()
        if not raw:
            continue
        caster = float if item.name == "partial_length_ratio" else int
        try:
            values[item.name] = caster(raw)
        except ValueError:
            raise ValueError(f"Invalid value for {_THRESHOLD_ENV[item.name]}: {raw!r}") from None

    thresholds = MatchingThresholds(**values)
    if not 0 < thresholds.partial_length_ratio <= 1:
        raise ValueError("SUBJECT_MATCH_PARTIAL_LENGTH_RATIO must be in (0, 1]")
    for name in ("relaxed_below", "fallback_min_confidence", "partial_confidence", "relaxed_partial_floor"):
        value = getattr(thresholds, name)
        if not 0 <= value <= 100:
            raise ValueError(f"{_THRESHOLD_ENV[name]} must be between 0 and 100, got {value}")
    return thresholds


def get_database_url() -> str | None:
    value = (os.getenv("DATABASE_URL") or "").strip()
    return value or None


def configure_logging(level: str | None = None) -> None:
    level_name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
