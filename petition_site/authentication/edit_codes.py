# petition_site/authentication/edit_codes.py

import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.exc import SQLAlchemyError

from petition_site.constants import EDIT_CODE_LENGTH, EDIT_CODE_TTL_MINUTES, Language
from petition_site.database.models import AuthToken, utcnow
from petition_site.errors import InvalidOrExpiredCodeError
from petition_site.notifications.messages import edit_code_message
from petition_site.security.input_validator import normalize_email

logger = logging.getLogger(__name__)

# Same response whether or not the email belongs to a signer.
CODE_REQUESTED_MESSAGE = "If your email is registered, you will receive a code shortly."


@dataclass
class EditSession:
    token_id: int
    person: object
    record: object


class EditCodeService:
    """One-time codes that let a returning signer edit their own signature.

    request_code -> verify_code (repeatable while the code is live) -> consume_token.
    Expiry is evaluated at lookup time; nothing is stored for it.
    """

    def __init__(self, repository, mailer=None, audit_logger=None, ttl_minutes=EDIT_CODE_TTL_MINUTES):
        self.repository = repository
        self.mailer = mailer
        self.audit_logger = audit_logger
        self.ttl = timedelta(minutes=ttl_minutes)

    def _now(self):
        # extracted for easier monkeypatching in tests
        return utcnow()

    def _audit(self, event_type, data=None, email=None):
        if self.audit_logger is not None:
            self.audit_logger.log_event(event_type, data, email=email)

    def generate_code(self):
        return f"{secrets.randbelow(10 ** EDIT_CODE_LENGTH):0{EDIT_CODE_LENGTH}d}"

    def request_code(self, email, language=None):
        normalized = normalize_email(email)
        person = self.repository.get_person_by_email(normalized) if normalized else None
        if person is None:
            self._audit('edit_code_requested', {'registered': False}, email=normalized)
            return CODE_REQUESTED_MESSAGE

        code = self.generate_code()
        token = AuthToken(email=normalized, token=code, expires_at=self._now() + self.ttl, used=False)
        with self.repository.transaction():
            self.repository.add_auth_token(token)

        self._send_code(person, code, language)
        self._audit('edit_code_requested', {'registered': True, 'token_id': token.id}, email=normalized)
        return CODE_REQUESTED_MESSAGE

    def _send_code(self, person, code, language):
        if self.mailer is None:
            logger.warning("No mailer configured, edit code for person %s not sent", person.id)
            return
        try:
            language = Language(language) if language else person.language
        except ValueError:
            language = person.language
        subject, html = edit_code_message(person.full_name, code, int(self.ttl.total_seconds() // 60), language)
        try:
            self.mailer.send(person.email_address, subject, html)
        except Exception:
            logger.warning("Edit code email for person %s could not be delivered", person.id, exc_info=True)

    def authorize(self, email, code):
        """Return a live token for (email, code) or raise InvalidOrExpiredCodeError."""
        normalized = normalize_email(email)
        code = code.strip() if isinstance(code, str) else ''
        token = None
        if normalized and code:
            token = self.repository.find_valid_token(normalized, code, self._now())
        if token is None:
            self._audit('edit_code_rejected', email=normalized)
            raise InvalidOrExpiredCodeError()
        return token

    def verify_code(self, email, code):
        token = self.authorize(email, code)
        person = self.repository.get_person_by_email(token.email)
        if person is None:
            raise InvalidOrExpiredCodeError()
        record = self.repository.get_record_for_person(person.id)
        # The token stays unused so the final update can present it again.
        self._audit('edit_code_verified', {'token_id': token.id}, email=token.email)
        return EditSession(token_id=token.id, person=person, record=record)

    def consume_token(self, token_id):
        """Mark a token used. A failure here is logged, never raised."""
        try:
            with self.repository.transaction():
                self.repository.mark_token_used(token_id)
            return True
        except SQLAlchemyError:
            logger.warning("Could not mark edit token %s as used", token_id, exc_info=True)
            self._audit('token_consume_failed', {'token_id': token_id})
            return False
