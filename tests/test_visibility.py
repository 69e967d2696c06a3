from datetime import datetime
from types import SimpleNamespace

import pytest

from petition_site.signatures.visibility import (
    has_visible_testimonial, placeholder_name, public_name, public_testimonials, visible_signatory_list,
)


def _person(name, language='EN', relationships=None, year_groups=None):
    return SimpleNamespace(full_name=name, submission_language=language,
                           relationship_to_school=relationships or ["Neighbour / Supporter - Riverain / Soutien de l’école"],
                           student_year_groups=year_groups or [])


def _record(consent, comment=None, support=True):
    return SimpleNamespace(consent_public_use=consent, supporting_comment=comment,
                           petition_support=support, submission_timestamp=datetime(2024, 5, 1, 9, 30))


def _testimonial(id, moderated=True, name="Someone"):
    return SimpleNamespace(id=id, is_moderated=moderated, person_name=name, content="Merci",
                           content_translated="Thanks", language='FR', created_at=datetime(2024, 5, 1))


@pytest.mark.parametrize("moderated", [True, False])
@pytest.mark.parametrize("comment", [None, "", "Great school"])
def test_no_consent_means_no_visible_testimonial(moderated, comment):
    record = _record(consent=False, comment=comment)
    assert has_visible_testimonial(record, _testimonial(1, moderated=moderated)) is False


def test_visible_testimonial_needs_comment_and_moderation():
    assert has_visible_testimonial(_record(True, "Great school"), _testimonial(1)) is True
    assert has_visible_testimonial(_record(True, "   "), _testimonial(1)) is False
    assert has_visible_testimonial(_record(True, "Great school"), _testimonial(1, moderated=False)) is False
    assert has_visible_testimonial(_record(True, "Great school"), None) is False


def test_public_name_uses_placeholder_without_consent():
    assert public_name(_record(True), _person("Alice")) == "Alice"
    assert public_name(_record(False), _person("Alice")) == "Anonymous"
    assert public_name(_record(False), _person("Aline", language='FR')) == "Anonyme"
    assert placeholder_name('DE') == "Anonymous"


def test_signatories_consenting_first_then_alphabetical():
    rows = [
        (_person("charlie"), _record(True), None),
        (_person("Secret"), _record(False), None),
        (_person("alice"), _record(True), None),
        (_person("Bob"), _record(True), None),
        (_person("Gone"), _record(True, support=False), None),
    ]

    names = [entry.name for entry in visible_signatory_list(rows)]

    assert names == ["alice", "Bob", "charlie", "Anonymous"]


def test_signatory_entry_never_exposes_email_or_comment():
    person = _person("Alice", year_groups=["CP"])
    entry = visible_signatory_list([(person, _record(True, "Great"), _testimonial(7))])[0]

    data = entry.to_dict()
    assert set(data) == {'name', 'relationship_to_school', 'student_year_groups', 'timestamp',
                         'has_testimonial', 'testimonial_id'}
    assert data['has_testimonial'] is True
    assert data['testimonial_id'] == 7
    assert data['student_year_groups'] == ["CP"]


def test_hidden_testimonial_id_is_not_listed():
    entry = visible_signatory_list([(_person("Bea"), _record(False, "Great"), _testimonial(3))])[0]
    assert entry.has_testimonial is False
    assert entry.testimonial_id is None


def test_public_testimonials_filters_and_enriches():
    consenting = (_person("Alice", year_groups=["GS"]), _record(True, "Merci"))
    withdrawn = (_person("Bob"), _record(False, "Merci"))
    rows = [
        _testimonial(1, name="Alice"),
        _testimonial(2, name="Anonymous"),
        _testimonial(3, moderated=False),
        _testimonial(4, name="Legacy Author"),
    ]

    visible = public_testimonials(rows, {1: consenting, 2: withdrawn, 3: consenting})

    assert [t.id for t in visible] == [1, 4]
    assert visible[0].year_groups == ["GS"]
    assert visible[1].relationships == []
