from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from logic import MAX_LEVEL, MIN_LEVEL
from models import EligibilityCheck, Program

logger = logging.getLogger(__name__)

REQUIRED_PROGRAM_COLUMNS = {
    "program_code",
    "active",
    "university",
    "abbreviation",
    "location",
    "faculty",
    "program_name",
    "aps_required",
    "duration",
    "description",
    "subject_requirements",
}


def _parse_int(value: str) -> int | None:
    value = (value or "").strip()
    return int(value) if value else None


def _parse_bool(value: str) -> bool:
    return str(value).strip().lower() in {"1", "true", "yes", "y"}


def _requirement(name: Any, level: Any, is_required: bool, alternatives: Any) -> dict[str, Any]:
    name = str(name or "").strip()
    if not name:
        raise ValueError(f"Subject requirement needs a name, got {name!r}")
    if isinstance(level, bool):
        raise ValueError(f"Invalid level for {name}: {level!r}")
    try:
        level = int(str(level).strip())
    except ValueError:
        raise ValueError(f"Invalid level for {name}: {level!r}") from None
    if not MIN_LEVEL <= level <= MAX_LEVEL:
        raise ValueError(f"Level for {name} must be {MIN_LEVEL}-{MAX_LEVEL}, got {level}")
    if isinstance(alternatives, str):
        alternatives = [alternatives]
    return {
        "name": name,
        "level": level,
        "is_required": is_required,
        "alternatives": [str(alt).strip() for alt in alternatives or [] if str(alt).strip()],
    }


def parse_subject_requirements(value: str) -> list[dict[str, Any]]:
    """Parse `Mathematics:5|Physical Sciences:5/Physics|Accounting:4?`.

    `/` separates accepted alternatives; a trailing `?` marks a recommended,
    non-required subject. A JSON list of objects with the same fields is also
    accepted and validated the same way.
    """
    raw = (value or "").strip()
    if not raw:
        return []
    if raw.startswith("["):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            raise ValueError(f"Invalid subject requirement JSON: {raw}") from None
        if not isinstance(parsed, list) or not all(isinstance(item, dict) for item in parsed):
            raise ValueError(f"Subject requirement JSON must be a list of objects: {raw}")
        return [
            _requirement(
                item.get("name"),
                item.get("level"),
                _parse_bool(item.get("is_required", True)),
                item.get("alternatives"),
            )
            for item in parsed
        ]

    requirements: list[dict[str, Any]] = []
    for item in raw.split("|"):
        item = item.strip()
        if not item:
            continue
        is_required = not item.endswith("?")
        item = item.rstrip("?").strip()
        name, sep, rest = item.partition(":")
        if not sep or not name.strip():
            raise ValueError(f"Subject requirement must look like Name:Level, got {item!r}")
        level_text, *alternatives = [part.strip() for part in rest.split("/")]
        requirements.append(_requirement(name, level_text, is_required, alternatives))
    return requirements


def validate_csv_columns(columns: list[str]) -> tuple[bool, list[str]]:
    missing = sorted(REQUIRED_PROGRAM_COLUMNS - set(columns))
    return len(missing) == 0, missing


def load_programs_from_csv(csv_text: str) -> list[dict[str, Any]]:
    reader = csv.DictReader(csv_text.splitlines())
    valid, missing = validate_csv_columns(reader.fieldnames or [])
    if not valid:
        raise ValueError(f"Missing required columns: {missing}")

    rows: list[dict[str, Any]] = []
    for row in reader:
        rows.append(
            {
                "program_code": row["program_code"].strip(),
                "active": _parse_bool(row["active"]),
                "university": row["university"].strip(),
                "abbreviation": row["abbreviation"].strip(),
                "location": row["location"] or None,
                "faculty": row["faculty"].strip(),
                "program_name": row["program_name"].strip(),
                "aps_required": _parse_int(row["aps_required"]) or 0,
                "duration": row["duration"] or None,
                "description": row["description"] or None,
                "subject_requirements": parse_subject_requirements(row["subject_requirements"]),
            }
        )
    return rows


def preview_diff(db: Session, rows: list[dict[str, Any]]) -> dict[str, int]:
    codes = [row["program_code"] for row in rows]
    existing = set(db.scalars(select(Program.program_code).where(Program.program_code.in_(codes))).all())
    to_update = len([code for code in codes if code in existing])
    return {"insert": len(codes) - to_update, "update": to_update}


def upsert_programs(db: Session, rows: list[dict[str, Any]], source: str = "csv") -> dict[str, int]:
    existing_map = {
        p.program_code: p
        for p in db.scalars(select(Program).where(Program.program_code.in_([row["program_code"] for row in rows]))).all()
    }

    inserted = 0
    updated = 0
    for row in rows:
        existing = existing_map.get(row["program_code"])
        if existing:
            for key, value in row.items():
                setattr(existing, key, value)
            updated += 1
        else:
            db.add(Program(**row))
            inserted += 1

    logger.info("Program upsert from %s: %d inserted, %d updated", source, inserted, updated)
    return {"inserted": inserted, "updated": updated}


def seed_programs_if_empty(db: Session, sample_csv_path: str | None = None) -> dict[str, int]:
    total = db.scalar(select(func.count()).select_from(Program))
    if total and total > 0:
        return {"inserted": 0, "updated": 0}

    csv_text = Path(sample_csv_path).read_text(encoding="utf-8") if sample_csv_path else default_catalogue_csv()
    return upsert_programs(db, load_programs_from_csv(csv_text), source="seed")


def fetch_active_programs(db: Session) -> list[Program]:
    return list(
        db.scalars(
            select(Program).where(Program.active.is_(True)).order_by(Program.abbreviation, Program.program_name)
        ).all()
    )


def record_eligibility_check(db: Session, evaluation: dict[str, Any], inputs: dict[str, Any]) -> EligibilityCheck:
    row = EligibilityCheck(
        program_code=evaluation.get("program_code"),
        total_aps=int(evaluation.get("total_aps") or 0),
        is_eligible=bool(evaluation.get("eligible")),
        inputs_json=json.loads(json.dumps(inputs, default=str)),
        results_json=json.loads(json.dumps(evaluation, default=str)),
    )
    db.add(row)
    return row


def sample_programs() -> list[dict[str, Any]]:
    return load_programs_from_csv(default_catalogue_csv())


def default_catalogue_csv() -> str:
    return """program_code,active,university,abbreviation,location,faculty,program_name,aps_required,duration,description,subject_requirements
UCT_MBCHB,true,University of Cape Town,UCT,"Cape Town, Western Cape",Health Sciences,Medicine,42,6 years,Comprehensive medical training to become a qualified doctor.,Mathematics:6|Physical Sciences:6|Life Sciences:6|English:6/English Home Language
UCT_CIVIL,true,University of Cape Town,UCT,"Cape Town, Western Cape",Engineering,Civil Engineering,38,4 years,"Design, construct and maintain civil infrastructure.",Mathematics:7|Physical Sciences:6|English:5
UCT_CS,true,University of Cape Town,UCT,"Cape Town, Western Cape",Science,Computer Science,34,3 years,"Programming, algorithms, and computational theory.",Mathematics:6|English:4|Information Technology:4?
UCT_LLB,true,University of Cape Town,UCT,"Cape Town, Western Cape",Law,Law (LLB),36,4 years,Comprehensive legal education and jurisprudence.,English:6/English Home Language
WITS_MBBCH,true,University of the Witwatersrand,Wits,"Johannesburg, Gauteng",Health Sciences,Medicine,40,6 years,Medical education and training for healthcare professionals.,Mathematics:6|Physical Sciences:6|Life Sciences:6|English:5
WITS_ENG,true,University of the Witwatersrand,Wits,"Johannesburg, Gauteng",Engineering,Engineering,36,4 years,Various engineering disciplines.,Mathematics:6|Physical Sciences:6|English:5
WITS_BCOM_ACC,true,University of the Witwatersrand,Wits,"Johannesburg, Gauteng",Commerce,BCom Accounting,32,3 years,Professional accounting and business studies.,Mathematics:5|English:5|Accounting:5?
UP_BVSC,true,University of Pretoria,UP,"Pretoria, Gauteng",Veterinary Science,Veterinary Science,38,6 years,Animal health and veterinary medicine.,Mathematics:5|Physical Sciences:5|Life Sciences:5|English:5
UP_ENG,true,University of Pretoria,UP,"Pretoria, Gauteng",Engineering,Engineering,34,4 years,Engineering disciplines and technology.,Mathematics:6|Physical Sciences:6|English:5
UP_MBCHB,true,University of Pretoria,UP,"Pretoria, Gauteng",Health Sciences,Medicine,38,6 years,Medical training and healthcare education.,
SU_MBCHB,true,Stellenbosch University,SU,"Stellenbosch, Western Cape",Medicine and Health Sciences,Medicine,38,6 years,Medical education and research.,
SU_ENG,true,Stellenbosch University,SU,"Stellenbosch, Western Cape",Engineering,Engineering,35,4 years,Engineering and applied sciences.,Mathematics:7|Physical Sciences:6|English:4/Afrikaans
UKZN_MBCHB,true,University of KwaZulu-Natal,UKZN,"Durban, KwaZulu-Natal",Health Sciences,Medicine,36,6 years,Medical training and healthcare education.,
UKZN_ENG,true,University of KwaZulu-Natal,UKZN,"Durban, KwaZulu-Natal",Engineering,Engineering,32,4 years,Engineering and technology programs.,
UJ_ENG,true,University of Johannesburg,UJ,"Johannesburg, Gauteng",Engineering and Built Environment,Engineering,30,4 years,Engineering technology and innovation.,Mathematics:5|Physical Sciences:5|English:4
UJ_BED,true,University of Johannesburg,UJ,"Johannesburg, Gauteng",Education,Education,24,4 years,Teacher education and development.,English:4|Mathematics:3/Mathematical Literacy
RU_LLB,true,Rhodes University,RU,"Grahamstown, Eastern Cape",Law,Law (LLB),32,4 years,Comprehensive legal education and jurisprudence.,
RU_ENGLIT,true,Rhodes University,RU,"Grahamstown, Eastern Cape",Humanities,English Literature,27,3 years,"Study of English language, literature, and communication.",English:5
CPUT_ENG,true,Cape Peninsula University of Technology,CPUT,"Cape Town, Western Cape",Engineering,Engineering,26,3 years,Applied engineering and technology.,Mathematics:4|Physical Sciences:4|English:4
TUT_IT,true,Tshwane University of Technology,TUT,"Pretoria, Gauteng",ICT,Information Technology,22,3 years,Information and communication technology.,Mathematics:3/Mathematical Literacy|English:4
VUT_ENG,true,Vaal University of Technology,VUT,"Vanderbijlpark, Gauteng",Engineering,Engineering,22,3 years,Engineering technology programs.,Mathematics:4|Physical Sciences:4|English:4
UWC_LLB,true,University of the Western Cape,UWC,"Cape Town, Western Cape",Law,Law (LLB),30,4 years,Comprehensive legal education and jurisprudence.,English:5
NWU_ENG,true,North-West University,NWU,"Potchefstroom, North West",Engineering,Engineering,30,4 years,Engineering and applied sciences.,Mathematics:6|Physical Sciences:6|English:4/Afrikaans
UFS_MBCHB,true,University of the Free State,UFS,"Bloemfontein, Free State",Health Sciences,Medicine,34,6 years,Medical education and healthcare training.,
"""
