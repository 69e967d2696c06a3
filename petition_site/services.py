# petition_site/services.py

from dataclasses import dataclass

from petition_site import db
from petition_site.audit.audit_logger import AuditLogger, load_signing_key
from petition_site.authentication.edit_codes import EditCodeService
from petition_site.constants import Language
from petition_site.database.repository import PetitionRepository
from petition_site.forum.threads import ForumService
from petition_site.notifications.mailer import ResendMailer
from petition_site.signatures.lifecycle import SignatureService
from petition_site.translation.gemini import GeminiTranslator
from petition_site.translation.orchestrator import TranslationOrchestrator


@dataclass
class PetitionServices:
    repository: PetitionRepository
    translations: TranslationOrchestrator
    mailer: object
    audit_logger: AuditLogger
    edit_codes: EditCodeService
    signatures: SignatureService
    forum: ForumService


def init_services(app, repository=None, translator=None, mailer=None, audit_logger=None):
    """Build the service graph for ``app`` and store it in ``app.extensions``.

    Any collaborator may be passed in; the rest are built from app.config.
    """
    config = app.config
    repository = repository or PetitionRepository(db.session)
    translator = translator or GeminiTranslator(config['GEMINI_API_KEY'], model=config['GEMINI_MODEL'])
    mailer = mailer or ResendMailer(config['RESEND_API_KEY'], config['MAIL_FROM'])
    audit_logger = audit_logger or AuditLogger(log_dir=config['AUDIT_LOG_DIR'],
                                               signing_key=load_signing_key(config['AUDIT_SIGNING_KEY']))

    translations = TranslationOrchestrator(translator, primary_language=Language(config['PRIMARY_LANGUAGE']))
    edit_codes = EditCodeService(repository, mailer=mailer, audit_logger=audit_logger,
                                 ttl_minutes=config['EDIT_CODE_TTL_MINUTES'])
    signatures = SignatureService(repository, translations, edit_codes, mailer=mailer,
                                  audit_logger=audit_logger,
                                  auto_moderate=config['TESTIMONIAL_AUTO_MODERATE'])
    services = PetitionServices(
        repository=repository,
        translations=translations,
        mailer=mailer,
        audit_logger=audit_logger,
        edit_codes=edit_codes,
        signatures=signatures,
        forum=ForumService(repository, translations),
    )
    app.extensions['petition'] = services
    return services
