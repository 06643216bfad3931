"""
Subject catalogue and name normalization.

Maps free-text NSC subject names ("Maths", "ENGLISH HL", "english home language")
to one canonical display name. Every alias belongs to exactly one canonical entry;
generic family names ("English", "Afrikaans") only own themselves and list their
members for matching and guidance.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field


STANDARD_SUBJECTS = [
    "English Home Language",
    "English First Additional Language",
    "Afrikaans Home Language",
    "Afrikaans First Additional Language",
    "Mathematics",
    "Mathematical Literacy",
    "Physical Sciences",
    "Life Sciences",
    "Geography",
    "History",
    "Business Studies",
    "Economics",
    "Accounting",
    "Life Orientation",
    "Computer Applications Technology",
    "Information Technology",
    "Engineering Graphics and Design",
    "Visual Arts",
    "Music",
    "Dramatic Arts",
    "Agricultural Sciences",
    "Tourism",
    "Consumer Studies",
    "Hospitality Studies",
    "Design",
    "Dance Studies",
]

LIFE_ORIENTATION = "Life Orientation"


@dataclass(frozen=True)
class SubjectMapping:
    canonical: str
    synonyms: tuple[str, ...] = ()
    excludes: tuple[str, ...] = ()
    generic: bool = False
    # Resolved canonical names of `excludes`, filled in when the index is built.
    excluded_canonicals: frozenset[str] = field(default=frozenset(), compare=False)


SUBJECT_MAPPINGS = [
    SubjectMapping(
        "Mathematics",
        ("Maths", "Math", "Pure Mathematics", "Core Mathematics", "Technical Mathematics"),
        ("Mathematical Literacy",),
    ),
    SubjectMapping(
        "Mathematical Literacy",
        ("Maths Lit", "Math Lit", "Maths Literacy", "Mathematical Studies", "Quantitative Literacy"),
        ("Mathematics",),
    ),
    SubjectMapping(
        "Physical Sciences",
        ("Physics", "Physical Science", "Physics and Chemistry"),
        ("Life Sciences",),
    ),
    SubjectMapping(
        "Life Sciences",
        ("Biology", "Life Science", "Biological Sciences"),
        ("Physical Sciences",),
    ),
    SubjectMapping(
        "English Home Language",
        ("English HL", "English First Language"),
        ("Afrikaans Home Language", "Afrikaans First Additional Language", "Afrikaans"),
    ),
    SubjectMapping(
        "English First Additional Language",
        ("English FAL", "English Additional"),
        ("Afrikaans Home Language", "Afrikaans First Additional Language", "Afrikaans"),
    ),
    SubjectMapping(
        "English",
        ("English Home Language", "English First Additional Language"),
        ("Afrikaans",),
        generic=True,
    ),
    SubjectMapping(
        "Afrikaans Home Language",
        ("Afrikaans HL", "Afrikaans First Language"),
        ("English Home Language", "English First Additional Language", "English"),
    ),
    SubjectMapping(
        "Afrikaans First Additional Language",
        ("Afrikaans FAL", "Afrikaans Additional"),
        ("English Home Language", "English First Additional Language", "English"),
    ),
    SubjectMapping(
        "Afrikaans",
        ("Afrikaans Home Language", "Afrikaans First Additional Language"),
        ("English",),
        generic=True,
    ),
    SubjectMapping("Geography", ("Geo",), ("History", "Economics")),
    SubjectMapping("History", ("Hist",), ("Geography", "Economics")),
    SubjectMapping("Accounting", ("Financial Accounting", "Acc"), ("Economics", "Business Studies")),
    SubjectMapping("Economics", ("Econ",), ("Accounting", "Business Studies")),
    SubjectMapping(
        "Business Studies",
        ("Business", "Business Management", "Entrepreneurship"),
        ("Economics", "Accounting"),
    ),
    SubjectMapping(
        "Computer Applications Technology",
        ("CAT", "Computer Studies", "Computer Technology"),
        ("Information Technology",),
    ),
    SubjectMapping("Information Technology", ("IT", "Information Systems"), ("Computer Applications Technology",)),
    SubjectMapping(
        "Engineering Graphics and Design",
        ("EGD", "Technical Drawing", "Graphics and Design"),
        ("Visual Arts",),
    ),
    SubjectMapping("Visual Arts", ("Art", "Fine Arts", "Creative Arts"), ("Engineering Graphics and Design",)),
    SubjectMapping("Life Orientation", ("LO", "Life Skills")),
    SubjectMapping("Agricultural Sciences", ("Agriculture",)),
    SubjectMapping("Dramatic Arts", ("Drama",)),
    SubjectMapping("Dance Studies", ("Dance",)),
]


def _key(value: str) -> str:
    return re.sub(r"[^0-9a-z]+", " ", value.lower()).strip()


def _build_index(
    mappings: list[SubjectMapping],
) -> tuple[dict[str, SubjectMapping], dict[str, SubjectMapping], dict[str, str]]:
    by_canonical: dict[str, SubjectMapping] = {}
    for mapping in mappings:
        key = _key(mapping.canonical)
        if key in by_canonical:
            raise ValueError(f"Duplicate canonical subject: {mapping.canonical}")
        by_canonical[key] = mapping

    by_alias: dict[str, SubjectMapping] = {}
    for mapping in mappings:
        if mapping.generic:
            continue
        for synonym in mapping.synonyms:
            key = _key(synonym)
            if key in by_canonical:
                raise ValueError(f"Alias {synonym!r} of {mapping.canonical} shadows a canonical subject")
            owner = by_alias.get(key)
            if owner is not None:
                raise ValueError(f"Alias {synonym!r} claimed by both {owner.canonical} and {mapping.canonical}")
            by_alias[key] = mapping

    resolved: dict[str, SubjectMapping] = {}
    for key, mapping in by_canonical.items():
        excluded = set()
        for name in mapping.excludes:
            target = by_canonical.get(_key(name)) or by_alias.get(_key(name))
            if target is None:
                raise ValueError(f"{mapping.canonical} excludes unknown subject {name!r}")
            excluded.add(target.canonical)
        resolved[key] = SubjectMapping(
            mapping.canonical,
            mapping.synonyms,
            mapping.excludes,
            mapping.generic,
            frozenset(excluded),
        )
    by_alias = {alias: resolved[_key(mapping.canonical)] for alias, mapping in by_alias.items()}

    display: dict[str, str] = {_key(name): name for name in STANDARD_SUBJECTS}
    for key, mapping in resolved.items():
        display.setdefault(key, mapping.canonical)
    return resolved, by_alias, display


_BY_CANONICAL, _BY_ALIAS, _DISPLAY_NAMES = _build_index(SUBJECT_MAPPINGS)

GENERIC_FAMILIES = [m.canonical for m in SUBJECT_MAPPINGS if m.generic]

_HOME_LANGUAGE = re.compile(r"\bhome\s+language\b|\bhl\b")
_FIRST_ADDITIONAL = re.compile(r"\bfirst\s+additional\b|\bfal\b")


def normalize_subject_name(subject_name: str) -> str:
    """Return the canonical display name for a subject, or the trimmed input when unknown."""
    if not isinstance(subject_name, str) or not subject_name:
        return subject_name

    cleaned = subject_name.strip()
    key = _key(cleaned)

    display = _DISPLAY_NAMES.get(key)
    if display:
        return display

    mapping = _BY_ALIAS.get(key)
    if mapping:
        return mapping.canonical

    for language in ("English", "Afrikaans"):
        if language.lower() not in key:
            continue
        if _HOME_LANGUAGE.search(key):
            return f"{language} Home Language"
        if _FIRST_ADDITIONAL.search(key):
            return f"{language} First Additional Language"

    if "afrikaans" in key:
        if "home" in key:
            return "Afrikaans Home Language"
        if "first" in key:
            return "Afrikaans First Additional Language"

    return cleaned


def find_subject_mapping(subject_name: str) -> SubjectMapping | None:
    if not isinstance(subject_name, str):
        return None
    key = _key(subject_name)
    return _BY_CANONICAL.get(key) or _BY_ALIAS.get(key)


def get_subject_alternatives(subject_name: str) -> list[str]:
    mapping = find_subject_mapping(subject_name)
    return list(mapping.synonyms) if mapping else []


def get_subject_aliases(standard_name: str) -> list[str]:
    mapping = _BY_CANONICAL.get(_key(standard_name or ""))
    if not mapping:
        return [standard_name]
    return [mapping.canonical, *mapping.synonyms]


def is_valid_subject_name(subject_name: str) -> bool:
    return normalize_subject_name(subject_name) in STANDARD_SUBJECTS


def is_life_orientation(subject_name: str) -> bool:
    return normalize_subject_name(subject_name) == LIFE_ORIENTATION


def get_subject_suggestions(partial_name: str) -> list[str]:
    if not isinstance(partial_name, str) or not partial_name.strip():
        return []

    lower = partial_name.strip().lower()
    starts_with = [s for s in STANDARD_SUBJECTS if s.lower().startswith(lower)]
    contains = [s for s in STANDARD_SUBJECTS if lower in s.lower() and s not in starts_with]
    return starts_with[:5] + contains[:5]
