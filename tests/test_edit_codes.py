import re
from datetime import timedelta

import pytest
from sqlalchemy.exc import SQLAlchemyError

from petition_site import db
from petition_site.authentication.edit_codes import CODE_REQUESTED_MESSAGE
from petition_site.database.models import AuthToken, utcnow
from petition_site.errors import InvalidOrExpiredCodeError


def _tokens(email):
    return db.session.query(AuthToken).filter_by(email=email).all()


def test_generated_codes_are_six_digits(services):
    for _ in range(20):
        assert re.fullmatch(r"\d{6}", services.edit_codes.generate_code())


def test_request_code_response_does_not_reveal_registration(services, sign, mailer):
    """Known and unknown emails get the same answer; only the known one gets a code."""
    sign("Alice", "alice@example.com")
    mailer.sent.clear()

    known = services.edit_codes.request_code("alice@example.com")
    unknown = services.edit_codes.request_code("nobody@example.com")

    assert known == unknown == CODE_REQUESTED_MESSAGE
    assert len(_tokens("alice@example.com")) == 1
    assert _tokens("nobody@example.com") == []
    assert [message['to'] for message in mailer.sent] == ["alice@example.com"]


def test_code_email_contains_code(services, sign, mailer, issue_code):
    sign("Alice", "alice@example.com")
    code = issue_code("alice@example.com", code='048213')

    assert code in mailer.sent[-1]['html']
    assert "15 minutes" in mailer.sent[-1]['html']


def test_mail_failure_still_issues_code(services, sign, mailer):
    sign("Alice", "alice@example.com")
    mailer.fail = True

    assert services.edit_codes.request_code("alice@example.com") == CODE_REQUESTED_MESSAGE
    assert len(_tokens("alice@example.com")) == 1


def test_verify_returns_person_and_record(services, sign, issue_code):
    receipt = sign("Alice", "alice@example.com")
    code = issue_code("alice@example.com")

    session = services.edit_codes.verify_code("  Alice@Example.com ", code)

    assert session.person.id == receipt.person_id
    assert session.record.id == receipt.record_id


def test_verify_does_not_consume_the_code(services, sign, issue_code):
    sign("Alice", "alice@example.com")
    code = issue_code("alice@example.com")

    services.edit_codes.verify_code("alice@example.com", code)
    services.edit_codes.verify_code("alice@example.com", code)

    assert _tokens("alice@example.com")[0].used is False


def test_wrong_code_is_rejected(services, sign, issue_code):
    sign("Alice", "alice@example.com")
    issue_code("alice@example.com", code='123456')

    with pytest.raises(InvalidOrExpiredCodeError):
        services.edit_codes.verify_code("alice@example.com", "654321")


def test_expired_code_is_rejected(services, sign, issue_code):
    sign("Alice", "alice@example.com")
    code = issue_code("alice@example.com")
    token = _tokens("alice@example.com")[0]
    token.expires_at = utcnow() - timedelta(minutes=1)
    db.session.commit()

    with pytest.raises(InvalidOrExpiredCodeError):
        services.edit_codes.verify_code("alice@example.com", code)


def test_code_expires_after_ttl(services, sign, issue_code, monkeypatch):
    sign("Alice", "alice@example.com")
    code = issue_code("alice@example.com")

    later = utcnow() + timedelta(minutes=16)
    monkeypatch.setattr(services.edit_codes, '_now', lambda: later)

    with pytest.raises(InvalidOrExpiredCodeError):
        services.edit_codes.verify_code("alice@example.com", code)


def test_used_code_is_rejected(services, sign, issue_code):
    sign("Alice", "alice@example.com")
    code = issue_code("alice@example.com")
    token = _tokens("alice@example.com")[0]

    assert services.edit_codes.consume_token(token.id) is True

    with pytest.raises(InvalidOrExpiredCodeError):
        services.edit_codes.verify_code("alice@example.com", code)


def test_earlier_codes_stay_valid(services, sign, issue_code):
    sign("Alice", "alice@example.com")
    first = issue_code("alice@example.com", code='111111')
    issue_code("alice@example.com", code='222222')

    assert services.edit_codes.verify_code("alice@example.com", first).person.full_name == "Alice"


def test_consume_failure_is_logged_not_raised(services, sign, issue_code, monkeypatch, audit_logger):
    sign("Alice", "alice@example.com")
    issue_code("alice@example.com")
    token = _tokens("alice@example.com")[0]

    def broken_mark(token_id):
        raise SQLAlchemyError("locked")

    monkeypatch.setattr(services.repository, 'mark_token_used', broken_mark)

    assert services.edit_codes.consume_token(token.id) is False
    with open(audit_logger.log_file) as f:
        assert '"token_consume_failed"' in f.read()
