import pytest

from subjects import (
    SubjectMapping,
    _build_index,
    find_subject_mapping,
    get_subject_aliases,
    get_subject_alternatives,
    get_subject_suggestions,
    is_life_orientation,
    is_valid_subject_name,
    normalize_subject_name,
)


def test_normalize_maps_aliases_to_canonical_names() -> None:
    assert normalize_subject_name("Maths") == "Mathematics"
    assert normalize_subject_name("maths lit") == "Mathematical Literacy"
    assert normalize_subject_name("  Biology ") == "Life Sciences"
    assert normalize_subject_name("english   hl") == "English Home Language"
    assert normalize_subject_name("English (Home Language)") == "English Home Language"
    assert normalize_subject_name("Maths-Lit") == "Mathematical Literacy"
    assert normalize_subject_name("Maths Lit.") == "Mathematical Literacy"
    assert normalize_subject_name("Afrikaans First Add. Language") == "Afrikaans First Additional Language"


def test_normalize_returns_trimmed_input_when_unknown() -> None:
    assert normalize_subject_name("  Marine Sciences ") == "Marine Sciences"
    assert normalize_subject_name("") == ""
    assert normalize_subject_name(None) is None


def test_normalize_is_idempotent() -> None:
    samples = ["Maths", "ENGLISH FAL", "Physics", "LO", "Marine Sciences", "English", "afrikaans home", "IT"]
    for sample in samples:
        once = normalize_subject_name(sample)
        assert normalize_subject_name(once) == once


def test_generic_family_keeps_its_own_name() -> None:
    assert normalize_subject_name("English") == "English"
    assert find_subject_mapping("English").generic is True
    assert find_subject_mapping("English Home Language").canonical == "English Home Language"


def test_every_alias_has_a_single_owner() -> None:
    mappings = [
        SubjectMapping("Mathematics", ("Maths",)),
        SubjectMapping("Mathematical Literacy", ("Maths",)),
    ]
    with pytest.raises(ValueError, match="claimed by both"):
        _build_index(mappings)


def test_unknown_exclusion_is_rejected() -> None:
    with pytest.raises(ValueError, match="unknown subject"):
        _build_index([SubjectMapping("Mathematics", (), ("Astrology",))])


def test_exclusions_resolve_to_canonical_names() -> None:
    mapping = find_subject_mapping("Afrikaans FAL")
    assert "English" in mapping.excluded_canonicals
    assert "English Home Language" in mapping.excluded_canonicals


def test_catalogue_helpers() -> None:
    assert get_subject_aliases("Mathematics")[:2] == ["Mathematics", "Maths"]
    assert get_subject_aliases("Tourism") == ["Tourism"]
    assert get_subject_alternatives("maths")[0] == "Maths"
    assert get_subject_alternatives("Tourism") == []
    assert is_valid_subject_name("Geo") is True
    assert is_valid_subject_name("Marine Sciences") is False
    assert is_life_orientation("Life Skills") is True
    assert get_subject_suggestions("Math") == ["Mathematics", "Mathematical Literacy"]
    assert get_subject_suggestions(" ") == []
