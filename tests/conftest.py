import os
import tempfile

# Configure before the package is imported: the app reads its config at import.
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['AUDIT_LOG_DIR'] = tempfile.mkdtemp(prefix='petition-audit-')
os.environ['TESTIMONIAL_AUTO_MODERATE'] = 'true'

import pytest

from petition_site import app as flask_app, db
from petition_site.audit.audit_logger import AuditLogger
from petition_site.constants import Language, Relationship
from petition_site.errors import NotificationError, TranslationError
from petition_site.services import init_services
from petition_site.signatures.forms import SignatureSubmission


class FakeTranslator:
    """Deterministic stand-in for GeminiTranslator.

    Detects ``language`` for every text and translates by prefixing the
    target code, e.g. ``"[EN] Merci"``.
    """

    def __init__(self, language='EN'):
        self.language = language
        self.fail_detect = False
        self.fail_translate = False
        self.fail_summarize = False
        self.calls = []

    def fail_all(self):
        self.fail_detect = self.fail_translate = self.fail_summarize = True

    def recover(self):
        self.fail_detect = self.fail_translate = self.fail_summarize = False

    def translate_calls(self):
        return [call for call in self.calls if call[0] == 'translate']

    def detect_language(self, text):
        self.calls.append(('detect', text))
        if self.fail_detect:
            raise TranslationError("provider down")
        return self.language

    def translate(self, text, source, target):
        self.calls.append(('translate', text, Language(source), Language(target)))
        if self.fail_translate:
            raise TranslationError("provider down")
        return f"[{Language(target).value}] {text}"

    def summarize(self, content, replies):
        self.calls.append(('summarize', content, tuple(replies)))
        if self.fail_summarize:
            raise TranslationError("provider down")
        return f"Summary: {len(replies)} replies"


class FakeMailer:
    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, to, subject, html):
        if self.fail:
            raise NotificationError("mail provider down")
        self.sent.append({'to': to, 'subject': subject, 'html': html})
        return True


@pytest.fixture
def app():
    flask_app.config.update(TESTING=True)
    with flask_app.app_context():
        db.create_all()
        yield flask_app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def translator():
    return FakeTranslator()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def audit_logger(tmp_path):
    return AuditLogger(log_dir=str(tmp_path / 'audit'))


@pytest.fixture
def services(app, translator, mailer, audit_logger):
    return init_services(app, translator=translator, mailer=mailer, audit_logger=audit_logger)


@pytest.fixture
def client(app, services):
    return app.test_client()


@pytest.fixture
def sign(services):
    """Submit a signature straight through the service layer."""
    def _sign(full_name, email, comment=None, consent=False, support=True,
              relationships=None, year_groups=None, language=Language.EN):
        submission = SignatureSubmission(
            full_name=full_name,
            email_address=email,
            relationships=relationships or [Relationship.NEIGHBOUR_SUPPORTER],
            year_groups=year_groups or [],
            language=language,
            petition_support=support,
            consent_public_use=consent,
            supporting_comment=comment,
        )
        return services.signatures.submit_signature(submission)
    return _sign


@pytest.fixture
def issue_code(services, monkeypatch):
    """Request an edit code for ``email`` and return it."""
    def _issue(email, code='123456'):
        monkeypatch.setattr(services.edit_codes, 'generate_code', lambda: code)
        services.edit_codes.request_code(email)
        return code
    return _issue
