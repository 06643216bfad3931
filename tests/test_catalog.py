from catalog import (
    analyze_degree_eligibility,
    calculate_overall_stats,
    calculate_university_stats,
    default_program_requirements,
    evaluate_program,
    evaluate_programs,
    filter_programs,
    group_programs_by_university,
)
from seed import sample_programs


def commerce_learner() -> list[dict]:
    return [
        {"name": "English FAL", "level": 5, "marks": 64},
        {"name": "Maths Lit", "level": 6, "marks": 72},
        {"name": "Accounting", "level": 5, "marks": 61},
        {"name": "Business Studies", "level": 6, "marks": 70},
        {"name": "Economics", "level": 4, "marks": 55},
        {"name": "Afrikaans FAL", "level": 5, "marks": 60},
        {"name": "Life Orientation", "level": 7, "marks": 85},
    ]


def program_by_code(code: str) -> dict:
    return next(p for p in sample_programs() if p["program_code"] == code)


def test_default_requirements_follow_field_keywords() -> None:
    assert default_program_requirements("Civil Engineering")["minimum_aps"] == 35
    assert default_program_requirements("Medicine")["minimum_aps"] == 40
    assert default_program_requirements("BCom Accounting")["minimum_aps"] == 30
    assert default_program_requirements("Computer Science")["minimum_aps"] == 32
    assert default_program_requirements("Law (LLB)")["minimum_aps"] == 35
    assert default_program_requirements("Surveying")["minimum_aps"] == 24


def test_program_with_alternative_maths_is_eligible() -> None:
    result = evaluate_program(program_by_code("UJ_BED"), commerce_learner())

    assert result["total_aps"] == 31
    assert result["eligible"] is True
    assert result["match_percentage"] == 100
    assert result["recommendation"] == "You qualify for this program!"
    assert result["details"][0] == "APS requirement met: 31/24"


def test_program_requiring_mathematics_reports_gaps() -> None:
    result = evaluate_program(program_by_code("WITS_BCOM_ACC"), commerce_learner())

    assert result["eligible"] is False
    assert result["aps_gap"] == 1
    assert result["missing_subjects"] == ["Mathematics"]
    assert result["match_percentage"] == 50
    assert result["recommendation"] == (
        "Improve your APS (need 1 more points) and complete missing subjects: Mathematics"
    )


def test_evaluate_programs_ranks_eligible_first() -> None:
    result = evaluate_programs(sample_programs(), commerce_learner())

    eligible = {p["program_code"] for p in result["programs"] if p["eligible"]}
    assert eligible == {"UJ_BED", "TUT_IT", "RU_ENGLIT", "UWC_LLB"}
    assert result["eligible_count"] == 4
    assert all(p["eligible"] for p in result["programs"][:4])
    assert result["stats"]["total_degrees"] == 24
    assert result["stats"]["performance_percentile"] == 74


def test_inactive_programs_are_skipped() -> None:
    programs = sample_programs()
    programs[0]["active"] = False

    result = evaluate_programs(programs, commerce_learner())

    assert len(result["programs"]) == 23


def test_university_analysis() -> None:
    programs = [
        {"program_name": "Engineering", "university": "Uni A", "abbreviation": "UA", "aps_required": 34},
        {"program_name": "Education", "university": "Uni A", "abbreviation": "UA", "aps_required": 24},
        {"program_name": "IT", "university": "Uni B", "abbreviation": "UB", "aps_required": 20},
    ]

    analysis = analyze_degree_eligibility(programs, 26)
    assert [p["eligible"] for p in analysis] == [False, True, True]
    assert [p["overqualified"] for p in analysis] == [False, False, True]

    stats = calculate_university_stats(group_programs_by_university(analysis), 26)
    assert [(u["abbreviation"], u["eligible_programs"], u["competitiveness"]) for u in stats] == [
        ("UA", 1, "Moderate"),
        ("UB", 1, "Accessible"),
    ]

    overall = calculate_overall_stats(analysis, stats, 26)
    assert overall["eligible_count"] == 2
    assert overall["eligibility_rate"] == 67
    assert overall["top_universities"] == 2
    assert calculate_overall_stats(analysis, stats, 0)["eligibility_rate"] == 0


def test_filter_programs() -> None:
    programs = sample_programs()

    assert len(filter_programs(programs, search_term="medicine")) == 6
    assert {p["abbreviation"] for p in filter_programs(programs, min_aps=38)} == {"UCT", "Wits", "UP", "SU"}
    assert len(filter_programs(programs, max_aps=22, faculty="ICT")) == 1
    assert len(filter_programs(programs, university="Rhodes University")) == 2


def test_default_requirements_are_independent_copies() -> None:
    education = default_program_requirements("Education")["required_subjects"]
    education[0]["alternatives"].append("Afrikaans")

    assert default_program_requirements("Arts")["required_subjects"][0]["alternatives"] == [
        "English Home Language",
        "English First Additional Language",
    ]
    assert "Afrikaans" not in default_program_requirements("Surveying")["required_subjects"][0]["alternatives"]
