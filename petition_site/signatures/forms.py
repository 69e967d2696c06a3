# petition_site/signatures/forms.py

from dataclasses import dataclass, field, fields
from typing import List, Optional

from petition_site.constants import Language, Relationship


class _Unset:
    """Marker for a field the caller did not send (as opposed to sending it empty)."""

    def __repr__(self):
        return 'UNSET'

    def __bool__(self):
        return False


UNSET = _Unset()


@dataclass
class SignatureSubmission:
    full_name: str
    email_address: str
    relationships: List[Relationship]
    year_groups: List[str] = field(default_factory=list)
    language: Language = Language.EN
    petition_support: bool = True
    consent_public_use: bool = False
    supporting_comment: Optional[str] = None


@dataclass
class SignatureReceipt:
    person_id: int
    record_id: int
    testimonial_id: Optional[int] = None


class _PartialUpdate:
    def supplied(self):
        """Return {name: value} for every field that was sent."""
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not UNSET}

    def is_supplied(self, name):
        return getattr(self, name) is not UNSET


@dataclass
class PersonUpdate(_PartialUpdate):
    full_name: object = UNSET
    relationships: object = UNSET
    year_groups: object = UNSET


@dataclass
class RecordUpdate(_PartialUpdate):
    petition_support: object = UNSET
    supporting_comment: object = UNSET
    consent_public_use: object = UNSET
