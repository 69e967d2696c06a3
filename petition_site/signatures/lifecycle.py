# petition_site/signatures/lifecycle.py

import logging

from sqlalchemy.exc import IntegrityError

from petition_site.constants import Language, Relationship
from petition_site.database.models import Person, PetitionRecord, Testimonial, utcnow
from petition_site.errors import AuthenticationError, DuplicateSignatureError, ValidationError
from petition_site.notifications.messages import thank_you_message
from petition_site.security.input_validator import InputValidator, normalize_email, require_year_groups
from petition_site.signatures.forms import SignatureReceipt
from petition_site.signatures.visibility import public_name

logger = logging.getLogger(__name__)


def _clean_comment(comment):
    return (comment or '').strip() or None


class SignatureService:
    """Creates signatures and applies authenticated edits.

    A signature is three rows (person, petition record and, when a comment is
    given, a testimonial). They are always written in one transaction.
    Translation runs before the transaction opens; email goes out only after
    it commits, and neither can fail the operation.
    """

    def __init__(self, repository, translations, edit_codes, mailer=None, audit_logger=None,
                 auto_moderate=True):
        self.repository = repository
        self.translations = translations
        self.edit_codes = edit_codes
        self.mailer = mailer
        self.audit_logger = audit_logger
        self.auto_moderate = auto_moderate
        self.validator = InputValidator()

    def _audit(self, event_type, data=None, email=None):
        if self.audit_logger is not None:
            self.audit_logger.log_event(event_type, data, email=email)

    def _validate_submission(self, submission):
        email = normalize_email(submission.email_address)
        if not self.validator.validate_email(email):
            raise ValidationError('email_address', 'A valid email address is required')
        if not (submission.full_name or '').strip():
            raise ValidationError('full_name', 'Full name is required')
        if not submission.relationships:
            raise ValidationError('relationship_to_school', 'Select at least one relationship to the school')
        require_year_groups(submission.relationships, submission.year_groups)
        return email

    def submit_signature(self, submission):
        email = self._validate_submission(submission)

        # Fast path only: the unique constraint on persons.email_address is what
        # actually stops two concurrent signups.
        if self.repository.get_person_by_email(email) is not None:
            self._audit('duplicate_signature_attempt', email=email)
            raise DuplicateSignatureError()

        comment = _clean_comment(submission.supporting_comment)
        bilingual = self.translations.ensure_bilingual(comment) if comment else None

        now = utcnow()
        person = Person(
            full_name=submission.full_name.strip(),
            email_address=email,
            relationship_to_school=[r.value for r in submission.relationships],
            student_year_groups=list(submission.year_groups),
            submission_language=Language(submission.language).value,
            created_at=now,
        )
        record = PetitionRecord(
            petition_support=submission.petition_support,
            supporting_comment=comment,
            consent_public_use=submission.consent_public_use,
            submission_timestamp=now,
            comment_en=bilingual.comment_en if bilingual else None,
            comment_fr=bilingual.comment_fr if bilingual else None,
        )
        testimonial = None

        try:
            with self.repository.transaction():
                self.repository.add_person(person)
                record.person_id = person.id
                self.repository.add_record(record)
                if bilingual is not None:
                    # Kept even without consent so moderators still have the content.
                    testimonial = self.repository.add_testimonial(Testimonial(
                        person_id=person.id,
                        person_name=public_name(record, person),
                        content=bilingual.original,
                        content_translated=bilingual.translated,
                        language=bilingual.language.value,
                        is_moderated=self.auto_moderate,
                        created_at=now,
                    ))
        except IntegrityError as e:
            self._audit('duplicate_signature_attempt', {'source': 'constraint'}, email=email)
            raise DuplicateSignatureError() from e

        receipt = SignatureReceipt(
            person_id=person.id,
            record_id=record.id,
            testimonial_id=testimonial.id if testimonial is not None else None,
        )
        self._audit('signature_created', {
            'person_id': receipt.person_id,
            'consent_public_use': record.consent_public_use,
            'has_comment': comment is not None,
            'translation_degraded': bool(bilingual and bilingual.degraded),
        }, email=email)
        self._send_thank_you(person)
        return receipt

    def _send_thank_you(self, person):
        if self.mailer is None:
            return
        subject, html = thank_you_message(person.full_name, person.language)
        try:
            self.mailer.send(person.email_address, subject, html)
        except Exception:
            logger.warning("Thank-you email for person %s could not be delivered", person.id, exc_info=True)

    def apply_edit(self, email, code, person_update, record_update):
        """Apply a signer's own edit, authorised by a live edit code.

        Person and record changes commit together or not at all. The code is
        marked used only after that commit.
        """
        try:
            token = self.edit_codes.authorize(email, code)
        except AuthenticationError as e:
            raise AuthenticationError() from e

        person = self.repository.get_person_by_email(token.email)
        if person is None:
            raise AuthenticationError()
        record = self.repository.get_record_for_person(person.id)

        person_fields = self._person_fields(person, person_update)
        previous_comment = _clean_comment(record.supporting_comment) if record else None
        previous_consent = record.consent_public_use if record else False

        record_fields = {}
        for name, value in record_update.supplied().items():
            record_fields[name] = _clean_comment(value) if name == 'supporting_comment' else value
        new_comment = record_fields.get('supporting_comment', previous_comment)
        new_consent = record_fields.get('consent_public_use', previous_consent)
        comment_changed = 'supporting_comment' in record_fields and new_comment != previous_comment
        consent_changed = new_consent != previous_consent

        # Look the testimonial up before the name can change under a legacy name match.
        testimonial = self.repository.find_testimonial_for(person)

        bilingual = None
        if new_comment and (comment_changed or testimonial is None):
            bilingual = self.translations.ensure_bilingual(new_comment)
        if comment_changed:
            record_fields['comment_en'] = bilingual.comment_en if bilingual else None
            record_fields['comment_fr'] = bilingual.comment_fr if bilingual else None

        with self.repository.transaction():
            self.repository.update_person(person, **person_fields)
            if record is None:
                record = self.repository.add_record(PetitionRecord(person_id=person.id, consent_public_use=False))
            self.repository.update_record(record, **record_fields)
            self._sync_testimonial(person, record, testimonial, new_comment, bilingual,
                                   comment_changed, consent_changed)

        self.edit_codes.consume_token(token.id)
        self._audit('signature_edited', {
            'person_id': person.id,
            'fields': sorted(set(person_fields) | set(record_fields)),
            'comment_changed': comment_changed,
            'consent_changed': consent_changed,
        }, email=person.email_address)
        return True

    def _person_fields(self, person, update):
        fields = {}
        relationships = person_relationships(person.relationship_to_school)
        year_groups = list(person.student_year_groups or [])
        if update.is_supplied('full_name'):
            name = (update.full_name or '').strip()
            if not name:
                raise ValidationError('full_name', 'Full name is required')
            fields['full_name'] = name
        if update.is_supplied('relationships'):
            if not update.relationships:
                raise ValidationError('relationship_to_school', 'Select at least one relationship to the school')
            relationships = list(update.relationships)
            fields['relationship_to_school'] = [r.value for r in relationships]
        if update.is_supplied('year_groups'):
            year_groups = list(update.year_groups or [])
            fields['student_year_groups'] = year_groups
        if 'relationship_to_school' in fields or 'student_year_groups' in fields:
            require_year_groups(relationships, year_groups)
        return fields

    def _sync_testimonial(self, person, record, testimonial, comment, bilingual, comment_changed, consent_changed):
        if not comment:
            # Clearing a comment never deletes its testimonial.
            return
        display_name = public_name(record, person)
        if testimonial is None:
            self.repository.add_testimonial(Testimonial(
                person_id=person.id,
                person_name=display_name,
                content=bilingual.original,
                content_translated=bilingual.translated,
                language=bilingual.language.value,
                is_moderated=self.auto_moderate,
            ))
        elif comment_changed:
            self.repository.update_testimonial(
                testimonial,
                person_id=person.id,
                person_name=display_name,
                content=bilingual.original,
                content_translated=bilingual.translated,
                language=bilingual.language.value,
                is_moderated=self.auto_moderate,
            )
        elif consent_changed:
            self.repository.update_testimonial(testimonial, person_id=person.id, person_name=display_name)
        else:
            # Unchanged comment and consent: the signer re-confirmed it.
            self.repository.update_testimonial(testimonial, person_id=person.id, person_name=display_name,
                                               is_moderated=True)


def person_relationships(values):
    """Relationship members for a list of stored values; unknown values are skipped."""
    members = []
    for value in values or []:
        member = Relationship.parse(value)
        if member is not None:
            members.append(member)
    return members
