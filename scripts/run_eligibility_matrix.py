from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

import pandas as pd

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from catalog import evaluate_programs
from config import configure_logging, get_database_url, load_thresholds
from db import create_db_engine, db_session, get_session_factory
from seed import fetch_active_programs, sample_programs

logger = logging.getLogger(__name__)


def load_programs() -> list[Any]:
    if not get_database_url():
        logger.info("DATABASE_URL not set; using the built-in sample catalogue")
        return sample_programs()
    factory = get_session_factory(create_db_engine())
    with db_session(factory) as db:
        return fetch_active_programs(db)


def scenario_inputs() -> list[dict[str, Any]]:
    return [
        {
            "name": "Science stream, English HL",
            "subjects": [
                {"name": "Mathematics", "level": 6, "marks": 74},
                {"name": "English Home Language", "level": 5, "marks": 65},
                {"name": "Physical Sciences", "level": 5, "marks": 62},
                {"name": "Life Sciences", "level": 5, "marks": 68},
            ],
        },
        {
            "name": "Maths Literacy only",
            "subjects": [{"name": "Mathematical Literacy", "level": 7, "marks": 88}],
        },
        {
            "name": "Weak Mathematics",
            "subjects": [{"name": "Mathematics", "level": 3, "marks": 45}],
        },
        {
            "name": "Commerce stream, Maths Lit",
            "subjects": [
                {"name": "English FAL", "level": 5, "marks": 64},
                {"name": "Maths Lit", "level": 6, "marks": 72},
                {"name": "Accounting", "level": 5, "marks": 61},
                {"name": "Business Studies", "level": 6, "marks": 70},
                {"name": "Economics", "level": 4, "marks": 55},
                {"name": "Afrikaans FAL", "level": 5, "marks": 60},
                {"name": "Life Orientation", "level": 7, "marks": 85},
            ],
        },
        {
            "name": "Full NSC certificate",
            "subjects": [
                {"name": "Mathematics", "level": 6, "points": 6, "marks": 75},
                {"name": "English Home Language", "level": 6, "points": 6, "marks": 80},
                {"name": "Physical Sciences", "level": 5, "points": 5, "marks": 70},
                {"name": "Life Sciences", "level": 5, "points": 5, "marks": 65},
                {"name": "Geography", "level": 5, "points": 5, "marks": 72},
                {"name": "Afrikaans FAL", "level": 6, "points": 6, "marks": 78},
                {"name": "Life Orientation", "level": 7, "points": 7, "marks": 85},
            ],
        },
    ]


def main() -> None:
    configure_logging()
    thresholds = load_thresholds()
    programs = load_programs()

    for scenario in scenario_inputs():
        result = evaluate_programs(programs, scenario["subjects"], thresholds=thresholds)
        table = pd.DataFrame(result["programs"])[
            ["abbreviation", "program_name", "aps_required", "eligible", "match_percentage", "recommendation"]
        ]

        print(f"\n=== {scenario['name']} ===")
        print(f"APS: {result['total_aps']} | eligible programs: {result['eligible_count']}/{len(result['programs'])}")
        print(table.head(10).to_string(index=False))


if __name__ == "__main__":
    main()
