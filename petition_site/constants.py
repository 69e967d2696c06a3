# petition_site/constants.py

import re
from enum import Enum


class Language(Enum):
    EN = "EN"
    FR = "FR"

    @property
    def other(self):
        return Language.FR if self is Language.EN else Language.EN


class Relationship(Enum):
    LYCEE_PARENT = "Lycée Parent - Parent d’élève du Lycée"
    HOLY_CROSS_PARENT = "Holy Cross Parent - Parent d’élève de Holy Cross"
    LYCEE_ALUMNI_PARENT = "Alumni Parent – Parent d’un ancien élève du Lycée"
    HOLY_CROSS_ALUMNI_PARENT = "Alumni Parent – Parent d’un ancien élève de Holy Cross"
    LYCEE_ALUMNI_OVER_16 = "Lycée Alumni (over 16) - Ancien élève du Lycée (16 ans ou plus)"
    HOLY_CROSS_ALUMNI_OVER_16 = "Holy Cross Alumni (over 16) - Ancien élève de Holy Cross (16 ans ou plus)"
    CURRENT_SCHOOL_EMPLOYEE = "Current School Employee - Membre actuel du personnel de l’établissement"
    FORMER_SCHOOL_EMPLOYEE = "Former School Employee - Ancien membre du personnel de l’établissement"
    PROSPECTIVE_FAMILY = "Prospective Family - Famille prospective – Intéressée par une future inscription"
    NEIGHBOUR_SUPPORTER = "Neighbour / Supporter - Riverain / Soutien de l’école"

    @property
    def label_en(self):
        return RELATIONSHIP_LABELS_EN[self]

    @classmethod
    def parse(cls, value):
        """Return the member for a stored value or a member name, else None."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        text = value.strip()
        for member in cls:
            if text == member.value or text == member.name:
                return member
        return None

    @classmethod
    def match_legacy(cls, label):
        """Map an older label variant (different dash characters) onto a member."""
        member = cls.parse(label)
        if member is not None or not isinstance(label, str):
            return member
        wanted = _fold_label(label)
        for member in cls:
            if _fold_label(member.value) == wanted:
                return member
        return None


_DASHES = re.compile(r"\s*[-–—]\s*")


def _fold_label(label):
    return _DASHES.sub(" - ", label.strip()).casefold()


RELATIONSHIP_LABELS_EN = {
    Relationship.LYCEE_PARENT: "Lycée Parent",
    Relationship.HOLY_CROSS_PARENT: "Holy Cross Parent",
    Relationship.LYCEE_ALUMNI_PARENT: "Lycée Alumni Parent",
    Relationship.HOLY_CROSS_ALUMNI_PARENT: "Holy Cross Alumni Parent",
    Relationship.LYCEE_ALUMNI_OVER_16: "Lycée Alumni (over 16)",
    Relationship.HOLY_CROSS_ALUMNI_OVER_16: "Holy Cross Alumni (over 16)",
    Relationship.CURRENT_SCHOOL_EMPLOYEE: "Current School Employee",
    Relationship.FORMER_SCHOOL_EMPLOYEE: "Former School Employee",
    Relationship.PROSPECTIVE_FAMILY: "Prospective Family",
    Relationship.NEIGHBOUR_SUPPORTER: "Neighbour / Supporter",
}

# Signers in these categories must tell us which year groups their children are in.
CURRENT_COMMUNITY_RELATIONSHIPS = frozenset({
    Relationship.LYCEE_PARENT,
    Relationship.HOLY_CROSS_PARENT,
    Relationship.LYCEE_ALUMNI_OVER_16,
    Relationship.HOLY_CROSS_ALUMNI_OVER_16,
    Relationship.CURRENT_SCHOOL_EMPLOYEE,
})

ANONYMOUS_NAMES = {
    Language.EN: "Anonymous",
    Language.FR: "Anonyme",
}

# French primary grade codes; "GSB", "GS-B" and "GS B" all count as "GS".
YEAR_GROUP_PREFIXES = ("PS", "MS", "GS", "CP", "CE1", "CE2", "CM1", "CM2")

DEFAULT_FORUM_AUTHOR = "Community Member"
SUMMARY_UNAVAILABLE = "Summary unavailable."

EDIT_CODE_LENGTH = 6
EDIT_CODE_TTL_MINUTES = 15
