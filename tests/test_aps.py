from aps import calculate_aps, calculate_aps_total, convert_percentage_to_points, validate_aps_subjects


def full_certificate() -> list[dict]:
    return [
        {"name": "Mathematics", "points": 6, "marks": 75},
        {"name": "English Home Language", "points": 6, "marks": 80},
        {"name": "Physical Sciences", "points": 5, "marks": 70},
        {"name": "Life Sciences", "points": 5, "marks": 65},
        {"name": "Geography", "points": 5, "marks": 72},
        {"name": "Afrikaans FAL", "points": 6, "marks": 78},
        {"name": "Life Orientation", "points": 7, "marks": 85},
    ]


def test_percentage_bands() -> None:
    cases = {100: 7, 80: 7, 79.5: 6, 70: 6, 60: 5, 50: 4, 40: 3, 30: 2, 29: 1, 0: 1}
    for marks, points in cases.items():
        assert convert_percentage_to_points(marks) == points


def test_out_of_range_or_non_numeric_marks_score_zero() -> None:
    for marks in (-1, 101, "80", None, True):
        assert convert_percentage_to_points(marks) == 0


def test_life_orientation_excluded_and_explicit_points_win() -> None:
    result = calculate_aps(full_certificate())

    assert result.total_score == 33
    assert result.is_valid is True
    assert len(result.counted_subjects) == 6
    assert result.excluded_subjects == ["Life Orientation"]


def test_marks_used_when_points_missing() -> None:
    subjects = [{"name": s["name"], "marks": s["marks"]} for s in full_certificate()]

    result = calculate_aps(subjects)

    # 6 + 7 + 6 + 5 + 6 + 6, Life Orientation dropped
    assert result.total_score == 36


def test_only_best_six_subjects_count() -> None:
    subjects = [
        {"name": "Mathematics", "marks": 90},
        {"name": "English Home Language", "marks": 85},
        {"name": "Physical Sciences", "marks": 75},
        {"name": "Life Sciences", "marks": 65},
        {"name": "Geography", "marks": 55},
        {"name": "History", "marks": 45},
        {"name": "Tourism", "marks": 35},
    ]

    result = calculate_aps(subjects)

    assert result.total_score == 32
    assert result.excluded_subjects == ["Tourism"]


def test_short_certificate_is_provisional() -> None:
    result = calculate_aps([{"name": "Mathematics", "marks": 75}, {"name": "LO", "marks": 90}])

    assert result.total_score == 6
    assert result.is_valid is False


def test_calculate_aps_total_needs_six_subjects() -> None:
    points = {"a": 7, "b": 6, "c": 5, "d": 5, "e": 4, "f": 3}
    assert calculate_aps_total(points) == 30
    assert calculate_aps_total({"a": 7, "b": 6}) == 0


def test_validate_aps_subjects() -> None:
    ok = validate_aps_subjects(full_certificate())
    assert ok["is_valid"] is True
    assert ok["errors"] == []
    assert ok["score"] == 100

    bad = validate_aps_subjects([{"name": "History", "marks": 50}, {"name": "History", "marks": 120}])
    assert bad["is_valid"] is False
    assert "An English language subject is required" in bad["errors"]
    assert "Mathematics or Mathematical Literacy is required" in bad["errors"]
    assert "Duplicate subject: History" in bad["errors"]
    assert "Marks for History must be between 0 and 100" in bad["errors"]
    assert "Life Orientation not captured" in bad["warnings"]
