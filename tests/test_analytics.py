from types import SimpleNamespace

import pytest

from petition_site.constants import Relationship
from petition_site.signatures.analytics import (
    build_report, consent_rate, language_breakdown, normalize_year_group, relationship_breakdown,
    year_group_breakdown,
)


def _person(relationships=(), year_groups=(), language='EN'):
    return SimpleNamespace(relationship_to_school=list(relationships), student_year_groups=list(year_groups),
                           submission_language=language)


@pytest.mark.parametrize("token,expected", [
    ("gsb", "GS"),
    ("GS-B", "GS"),
    ("  GS B ", "GS"),
    ("CM1a", "CM1"),
    ("CP", "CP"),
    ("Year 7", "YEAR 7"),
])
def test_normalize_year_group(token, expected):
    assert normalize_year_group(token) == expected


def test_year_group_variants_share_one_key():
    persons = [_person(year_groups=["gsb"]), _person(year_groups=["GS-B", "CP"]), _person(year_groups=["  GS B "])]
    assert year_group_breakdown(persons) == {"GS": 3, "CP": 1}


def test_consent_rate_for_no_records_is_zero():
    assert consent_rate([]) == 0.0


def test_consent_rate_is_a_fraction():
    records = [SimpleNamespace(consent_public_use=value) for value in (True, False, False, False)]
    assert consent_rate(records) == 0.25


def test_relationship_breakdown_uses_english_labels():
    persons = [
        _person([Relationship.LYCEE_PARENT.value, Relationship.NEIGHBOUR_SUPPORTER.value]),
        _person([Relationship.LYCEE_PARENT.value]),
        _person(["Something older"]),
    ]
    assert relationship_breakdown(persons) == {
        "Lycée Parent": 2,
        "Neighbour / Supporter": 1,
        "Something older": 1,
    }


def test_language_breakdown_lists_both_languages():
    assert language_breakdown([_person(language='FR')]) == {'EN': 0, 'FR': 1}


def test_build_report_counts_moderated_testimonials():
    persons = [_person(language='EN'), _person(language='FR')]
    records = [SimpleNamespace(consent_public_use=True), SimpleNamespace(consent_public_use=False)]
    testimonials = [SimpleNamespace(is_moderated=True), SimpleNamespace(is_moderated=False)]

    report = build_report(persons, records, testimonials).to_dict()

    assert report['total_signatures'] == 2
    assert report['consent_rate'] == 0.5
    assert report['testimonials_count'] == 1
    assert report['language_breakdown'] == {'EN': 1, 'FR': 1}
