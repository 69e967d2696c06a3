# petition_site/signatures/analytics.py

import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict

from petition_site.constants import Language, Relationship, YEAR_GROUP_PREFIXES

# "GSB", "GS-B", "GS B" -> "GS": a known grade code, an optional separator, one class letter.
_YEAR_GROUP = re.compile(r'^({})[\s\-]?[A-Z]?$'.format('|'.join(YEAR_GROUP_PREFIXES)))


def normalize_year_group(token):
    trimmed = token.strip().upper()
    match = _YEAR_GROUP.match(trimmed)
    return match.group(1) if match else trimmed


def relationship_breakdown(persons):
    counts = Counter()
    for person in persons:
        for value in person.relationship_to_school or []:
            member = Relationship.parse(value)
            counts[member.label_en if member else value] += 1
    return dict(counts)


def year_group_breakdown(persons):
    counts = Counter()
    for person in persons:
        for token in person.student_year_groups or []:
            key = normalize_year_group(token)
            if key:
                counts[key] += 1
    return dict(counts)


def language_breakdown(persons):
    counts = {language.value: 0 for language in Language}
    for person in persons:
        counts[person.submission_language] = counts.get(person.submission_language, 0) + 1
    return counts


def consent_rate(records):
    """Fraction of records consenting to public use; 0.0 when there are none."""
    records = list(records)
    if not records:
        return 0.0
    return sum(1 for record in records if record.consent_public_use) / len(records)


@dataclass
class AnalyticsReport:
    total_signatures: int
    consent_rate: float
    testimonials_count: int
    relationship_breakdown: Dict[str, int] = field(default_factory=dict)
    year_group_breakdown: Dict[str, int] = field(default_factory=dict)
    language_breakdown: Dict[str, int] = field(default_factory=dict)

    def to_dict(self):
        return {
            'total_signatures': self.total_signatures,
            'consent_rate': self.consent_rate,
            'testimonials_count': self.testimonials_count,
            'relationship_breakdown': self.relationship_breakdown,
            'year_group_breakdown': self.year_group_breakdown,
            'language_breakdown': self.language_breakdown,
        }


def build_report(persons, records, testimonials):
    persons, records = list(persons), list(records)
    return AnalyticsReport(
        total_signatures=len(persons),
        consent_rate=consent_rate(records),
        testimonials_count=sum(1 for t in testimonials if t.is_moderated),
        relationship_breakdown=relationship_breakdown(persons),
        year_group_breakdown=year_group_breakdown(persons),
        language_breakdown=language_breakdown(persons),
    )
