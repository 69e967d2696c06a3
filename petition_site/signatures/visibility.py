# petition_site/signatures/visibility.py
"""Which parts of a signature the public may see.

Pure functions over stored rows. They only read attributes, so any object
with the model's attribute names works (tests use plain namespaces).
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from petition_site.constants import ANONYMOUS_NAMES, Language


def placeholder_name(language):
    try:
        return ANONYMOUS_NAMES[Language(language)]
    except ValueError:
        return ANONYMOUS_NAMES[Language.EN]


def public_name(record, person):
    if record.consent_public_use:
        return person.full_name
    return placeholder_name(person.submission_language)


def has_visible_testimonial(record, testimonial):
    if testimonial is None or not record.consent_public_use:
        return False
    comment = record.supporting_comment or ''
    return bool(comment.strip()) and bool(testimonial.is_moderated)


@dataclass(frozen=True)
class SignatoryEntry:
    name: str
    relationships: List[str]
    year_groups: List[str]
    timestamp: datetime
    has_testimonial: bool
    testimonial_id: Optional[int] = None

    def to_dict(self):
        return {
            'name': self.name,
            'relationship_to_school': list(self.relationships),
            'student_year_groups': list(self.year_groups),
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'has_testimonial': self.has_testimonial,
            'testimonial_id': self.testimonial_id,
        }


def visible_signatory_list(signatures):
    """Public list of supporters from (person, record, testimonial) triples.

    Consenting signers come first; each group is alphabetical by display
    name, so anonymous entries sort together under their placeholder.
    """
    supporters = [(person, record, testimonial)
                  for person, record, testimonial in signatures
                  if record.petition_support]
    supporters.sort(key=lambda row: (not row[1].consent_public_use,
                                     public_name(row[1], row[0]).casefold()))

    entries = []
    for person, record, testimonial in supporters:
        visible = has_visible_testimonial(record, testimonial)
        entries.append(SignatoryEntry(
            name=public_name(record, person),
            relationships=list(person.relationship_to_school or []),
            year_groups=list(person.student_year_groups or []),
            timestamp=record.submission_timestamp,
            has_testimonial=visible,
            testimonial_id=testimonial.id if visible else None,
        ))
    return entries


@dataclass(frozen=True)
class PublicTestimonial:
    id: int
    person_name: str
    content: str
    content_translated: Optional[str]
    language: str
    created_at: datetime
    relationships: List[str] = field(default_factory=list)
    year_groups: List[str] = field(default_factory=list)

    def to_dict(self):
        return {
            'id': self.id,
            'person_name': self.person_name,
            'content': self.content,
            'content_translated': self.content_translated,
            'language': self.language,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'relationship_to_school': list(self.relationships),
            'student_year_groups': list(self.year_groups),
        }


def public_testimonials(testimonials, owners):
    """Moderated testimonials enriched with their author's relationships.

    ``owners`` maps a testimonial id to its (person, record) pair, or omits it
    when the author cannot be resolved. A resolved author must still consent
    to public use; unresolved rows are shown on the moderation flag alone.
    """
    visible = []
    for testimonial in testimonials:
        if not testimonial.is_moderated:
            continue
        person, record = owners.get(testimonial.id, (None, None))
        if record is not None and not record.consent_public_use:
            continue
        visible.append(PublicTestimonial(
            id=testimonial.id,
            person_name=testimonial.person_name,
            content=testimonial.content,
            content_translated=testimonial.content_translated,
            language=testimonial.language,
            created_at=testimonial.created_at,
            relationships=list(person.relationship_to_school or []) if person is not None else [],
            year_groups=list(person.student_year_groups or []) if person is not None else [],
        ))
    return visible
