import pytest
from sqlalchemy import func, select

from catalog import evaluate_program
from db import create_db_engine, db_session, get_session_factory, init_schema, normalize_database_url
from models import EligibilityCheck, Program
from seed import (
    fetch_active_programs,
    load_programs_from_csv,
    parse_subject_requirements,
    preview_diff,
    record_eligibility_check,
    sample_programs,
    seed_programs_if_empty,
    upsert_programs,
)


def make_factory():
    engine = create_db_engine("sqlite://")
    init_schema(engine)
    return get_session_factory(engine)


def test_parse_subject_requirements() -> None:
    parsed = parse_subject_requirements("Mathematics:5|Physical Sciences:5/Physics|Accounting:4?")

    assert parsed == [
        {"name": "Mathematics", "level": 5, "is_required": True, "alternatives": []},
        {"name": "Physical Sciences", "level": 5, "is_required": True, "alternatives": ["Physics"]},
        {"name": "Accounting", "level": 4, "is_required": False, "alternatives": []},
    ]
    assert parse_subject_requirements("") == []
    assert parse_subject_requirements('[{"name": "English", "level": 4}]') == [
        {"name": "English", "level": 4, "is_required": True, "alternatives": []}
    ]


def test_parse_subject_requirements_rejects_bad_levels() -> None:
    bad_values = (
        "Mathematics:x",
        "Mathematics:9",
        "Mathematics",
        ":5",
        '[{"name": "Mathematics", "level": 9}]',
        '[{"level": 5}]',
        '["Mathematics"]',
    )
    for value in bad_values:
        with pytest.raises(ValueError):
            parse_subject_requirements(value)


def test_json_requirements_parse_required_flag() -> None:
    parsed = parse_subject_requirements(
        '[{"name": " Accounting ", "level": "5", "is_required": "false", "alternatives": ["Economics"]}]'
    )

    assert parsed == [{"name": "Accounting", "level": 5, "is_required": False, "alternatives": ["Economics"]}]


def test_load_programs_requires_columns() -> None:
    with pytest.raises(ValueError, match="Missing required columns"):
        load_programs_from_csv("program_code,program_name\nX,Y\n")


def test_sample_catalogue_loads() -> None:
    rows = sample_programs()

    assert len(rows) == 24
    uct_med = rows[0]
    assert uct_med["program_code"] == "UCT_MBCHB"
    assert uct_med["aps_required"] == 42
    assert uct_med["location"] == "Cape Town, Western Cape"
    assert uct_med["subject_requirements"][-1]["alternatives"] == ["English Home Language"]


def test_upsert_inserts_then_updates() -> None:
    factory = make_factory()
    rows = sample_programs()

    with db_session(factory) as db:
        assert preview_diff(db, rows) == {"insert": 24, "update": 0}
        assert upsert_programs(db, rows) == {"inserted": 24, "updated": 0}

    rows[0]["active"] = False
    with db_session(factory) as db:
        assert preview_diff(db, rows) == {"insert": 0, "update": 24}
        assert upsert_programs(db, rows) == {"inserted": 0, "updated": 24}

    with db_session(factory) as db:
        programs = fetch_active_programs(db)
        assert len(programs) == 23
        assert programs[0].abbreviation == "CPUT"


def test_seed_only_runs_on_empty_catalogue() -> None:
    factory = make_factory()

    with db_session(factory) as db:
        assert seed_programs_if_empty(db) == {"inserted": 24, "updated": 0}
    with db_session(factory) as db:
        assert seed_programs_if_empty(db) == {"inserted": 0, "updated": 0}


def test_session_rolls_back_on_error() -> None:
    factory = make_factory()

    with pytest.raises(RuntimeError):
        with db_session(factory) as db:
            upsert_programs(db, sample_programs())
            raise RuntimeError("boom")

    with db_session(factory) as db:
        assert db.scalar(select(func.count()).select_from(Program)) == 0


def test_record_eligibility_check() -> None:
    factory = make_factory()
    subjects = [{"name": "English FAL", "level": 5, "marks": 64}, {"name": "Maths Lit", "level": 6, "marks": 72}]

    with db_session(factory) as db:
        seed_programs_if_empty(db)
    with db_session(factory) as db:
        program = db.scalar(select(Program).where(Program.program_code == "TUT_IT"))
        evaluation = evaluate_program(program, subjects)
        record_eligibility_check(db, evaluation, {"subjects": subjects})

    with db_session(factory) as db:
        row = db.scalar(select(EligibilityCheck))
        assert row.program_code == "TUT_IT"
        assert row.total_aps == 11
        assert row.is_eligible is False
        assert row.inputs_json["subjects"][1]["name"] == "Maths Lit"
        assert row.results_json["subject_check"]["is_eligible"] is True


def test_normalize_database_url() -> None:
    assert (
        normalize_database_url("postgres://u:p@db.example.com:5432/app")
        == "postgresql+psycopg2://u:p@db.example.com:5432/app?sslmode=require"
    )
    assert normalize_database_url("postgresql://u:p@localhost/app") == "postgresql+psycopg2://u:p@localhost/app"
    assert normalize_database_url('"sqlite:///local.db"') == "sqlite:///local.db"


def test_create_engine_requires_url(monkeypatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)

    with pytest.raises(RuntimeError, match="DATABASE_URL is required"):
        create_db_engine()
