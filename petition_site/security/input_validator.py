# petition_site/security/input_validator.py

import re
from html import unescape

import bleach

from petition_site.constants import CURRENT_COMMUNITY_RELATIONSHIPS, Language, Relationship
from petition_site.errors import ValidationError
from petition_site.signatures.forms import PersonUpdate, RecordUpdate, SignatureSubmission

# Input validation and sanitization at the public boundary, before any write.

MAX_NAME_LENGTH = 120
MAX_COMMENT_LENGTH = 2000
MAX_YEAR_GROUPS = 12
MAX_YEAR_GROUP_LENGTH = 20


def normalize_email(email):
    if not isinstance(email, str):
        return ''
    return email.strip().lower()


def require_year_groups(relationships, year_groups):
    """Year groups are mandatory for current parents, older alumni and staff."""
    if CURRENT_COMMUNITY_RELATIONSHIPS.intersection(relationships) and not year_groups:
        raise ValidationError('student_year_groups', 'Year groups are required for current community members')


class InputValidator:
    def __init__(self):
        self.allowed_html_tags = []
        self.allowed_html_attributes = {}

        self.patterns = {
            'email': re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'),
            'xss_script': re.compile(r'<script[^>]*>.*?</script>', re.IGNORECASE | re.DOTALL),
            'xss_event': re.compile(r'\bon\w+\s*=', re.IGNORECASE)
        }

    def sanitize_string(self, input_str, max_length=255):
        if not isinstance(input_str, str):
            raise ValueError("Input must be a string")
        if len(input_str) > max_length:
            input_str = input_str[:max_length]

        sanitized = re.sub(self.patterns['xss_script'], '', input_str)
        sanitized = re.sub(self.patterns['xss_event'], '', sanitized)

        sanitized = bleach.clean(sanitized, tags=self.allowed_html_tags, attributes=self.allowed_html_attributes, strip=True)
        # bleach escapes what it keeps; store plain text and escape at render time.
        return unescape(sanitized).strip()

    def validate_email(self, email):
        return isinstance(email, str) and bool(self.patterns['email'].match(email))

    # Field parsers: each returns the clean value or raises ValidationError.

    def parse_email(self, value, field='email_address'):
        email = normalize_email(value)
        if not self.validate_email(email):
            raise ValidationError(field, 'A valid email address is required')
        return email

    def parse_name(self, value, field='full_name'):
        if not isinstance(value, str):
            raise ValidationError(field, 'Full name is required')
        if len(value.strip()) > MAX_NAME_LENGTH:
            raise ValidationError(field, f'Full name must be at most {MAX_NAME_LENGTH} characters')
        name = self.sanitize_string(value, max_length=MAX_NAME_LENGTH)
        if not name:
            raise ValidationError(field, 'Full name is required')
        return name

    def parse_relationships(self, value, field='relationship_to_school'):
        if not isinstance(value, (list, tuple)) or not value:
            raise ValidationError(field, 'Select at least one relationship to the school')
        relationships = []
        for item in value:
            member = Relationship.parse(item)
            if member is None:
                raise ValidationError(field, f'Unknown relationship: {item}')
            if member not in relationships:
                relationships.append(member)
        return relationships

    def parse_year_groups(self, value, field='student_year_groups'):
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(',')
        if not isinstance(value, (list, tuple)):
            raise ValidationError(field, 'Year groups must be a list or a comma-separated string')
        groups = []
        for item in value:
            if not isinstance(item, str):
                raise ValidationError(field, 'Year groups must be text')
            token = self.sanitize_string(item, max_length=MAX_YEAR_GROUP_LENGTH)
            if token:
                groups.append(token)
        if len(groups) > MAX_YEAR_GROUPS:
            raise ValidationError(field, f'At most {MAX_YEAR_GROUPS} year groups can be listed')
        return groups

    def parse_language(self, value, field='submission_language'):
        if isinstance(value, Language):
            return value
        try:
            return Language(str(value).strip().upper())
        except ValueError:
            raise ValidationError(field, 'Language must be EN or FR')

    def parse_comment(self, value, field='supporting_comment'):
        if value is None:
            return ''
        if not isinstance(value, str):
            raise ValidationError(field, 'Comment must be text')
        if len(value) > MAX_COMMENT_LENGTH:
            raise ValidationError(field, f'Comment must be at most {MAX_COMMENT_LENGTH} characters')
        return self.sanitize_string(value, max_length=MAX_COMMENT_LENGTH)

    def parse_flag(self, value, field):
        if not isinstance(value, bool):
            raise ValidationError(field, 'Must be true or false')
        return value

    # Payload parsers used by the JSON routes

    def parse_submission(self, person, record):
        if not isinstance(person, dict):
            raise ValidationError('person', 'Person data with email is required')
        if not isinstance(record, dict):
            raise ValidationError('record', 'Petition record data is required')

        relationships = self.parse_relationships(person.get('relationship_to_school'))
        year_groups = self.parse_year_groups(person.get('student_year_groups'))
        require_year_groups(relationships, year_groups)

        return SignatureSubmission(
            full_name=self.parse_name(person.get('full_name')),
            email_address=self.parse_email(person.get('email_address')),
            relationships=relationships,
            year_groups=year_groups,
            language=self.parse_language(person.get('submission_language', Language.EN.value)),
            petition_support=self.parse_flag(record.get('petition_support', True), 'petition_support'),
            consent_public_use=self.parse_flag(record.get('consent_public_use', False), 'consent_public_use'),
            supporting_comment=self.parse_comment(record.get('supporting_comment')) or None,
        )

    def parse_person_update(self, payload):
        """Only keys present in the payload are marked as supplied."""
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            raise ValidationError('person_updates', 'Must be an object')
        update = PersonUpdate()
        if 'full_name' in payload:
            update.full_name = self.parse_name(payload['full_name'])
        if 'relationship_to_school' in payload:
            update.relationships = self.parse_relationships(payload['relationship_to_school'])
        if 'student_year_groups' in payload:
            update.year_groups = self.parse_year_groups(payload['student_year_groups'])
        return update

    def parse_record_update(self, payload):
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            raise ValidationError('record_updates', 'Must be an object')
        update = RecordUpdate()
        if 'petition_support' in payload:
            update.petition_support = self.parse_flag(payload['petition_support'], 'petition_support')
        if 'supporting_comment' in payload:
            update.supporting_comment = self.parse_comment(payload['supporting_comment'])
        if 'consent_public_use' in payload:
            update.consent_public_use = self.parse_flag(payload['consent_public_use'], 'consent_public_use')
        return update
