# petition_site/maintenance.py
"""One-off data repair jobs, run through the Flask CLI (see commands.py)."""

import logging

from petition_site.constants import Relationship

logger = logging.getLogger(__name__)


def translate_missing_testimonials(repository, translations):
    """Re-translate testimonials whose translation is a copy of the original.

    That happens when the provider was down at submission time. Returns the
    number of testimonials that now carry a real translation.
    """
    fixed = 0
    for testimonial in repository.list_testimonials():
        if testimonial.content_translated != testimonial.content:
            continue
        bilingual = translations.ensure_bilingual(testimonial.content)
        if bilingual.degraded:
            logger.warning("Testimonial %s still untranslated", testimonial.id)
            continue
        with repository.transaction():
            repository.update_testimonial(testimonial, content_translated=bilingual.translated,
                                          language=bilingual.language.value)
        fixed += 1
        logger.info("Testimonial %s translated from %s", testimonial.id, bilingual.language.value)
    return fixed


def normalize_relationship_labels(repository):
    """Rewrite legacy relationship label spellings to the canonical values.

    Returns the number of persons updated. Labels that match nothing are left alone.
    """
    updated = 0
    for person in repository.list_persons():
        current = list(person.relationship_to_school or [])
        canonical = []
        for label in current:
            member = Relationship.match_legacy(label)
            value = member.value if member is not None else label
            if value not in canonical:
                canonical.append(value)
        if canonical != current:
            with repository.transaction():
                repository.update_person(person, relationship_to_school=canonical)
            updated += 1
    return updated
