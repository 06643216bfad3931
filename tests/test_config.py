import pytest

from config import DEFAULT_THRESHOLDS, get_database_url, load_thresholds


def test_load_thresholds_defaults() -> None:
    assert load_thresholds({}) == DEFAULT_THRESHOLDS


def test_load_thresholds_reads_env_values() -> None:
    thresholds = load_thresholds(
        {"SUBJECT_MATCH_RELAXED_BELOW": "70", "SUBJECT_MATCH_PARTIAL_LENGTH_RATIO": " 0.75 "}
    )

    assert thresholds.relaxed_below == 70
    assert thresholds.partial_length_ratio == 0.75
    assert thresholds.fallback_min_confidence == DEFAULT_THRESHOLDS.fallback_min_confidence


def test_load_thresholds_rejects_bad_values() -> None:
    with pytest.raises(ValueError, match="SUBJECT_MATCH_FALLBACK_MIN_CONFIDENCE"):
        load_thresholds({"SUBJECT_MATCH_FALLBACK_MIN_CONFIDENCE": "forty"})
    with pytest.raises(ValueError):
        load_thresholds({"SUBJECT_MATCH_PARTIAL_LENGTH_RATIO": "1.5"})
    with pytest.raises(ValueError):
        load_thresholds({"SUBJECT_MATCH_PARTIAL_CONFIDENCE": "120"})


def test_get_database_url(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "  ")
    assert get_database_url() is None

    monkeypatch.setenv("DATABASE_URL", "sqlite:///local.db ")
    assert get_database_url() == "sqlite:///local.db"
