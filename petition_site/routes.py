# petition_site/routes.py

# JSON API for the petition site: signing, the edit-code flow, public
# listings, analytics and the community forum.

import logging

from flask import current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from petition_site import app, db
from petition_site.errors import (
    AuthenticationError, DuplicateSignatureError, NotFoundError, ValidationError,
)
from petition_site.operations.health_monitor import check_health
from petition_site.security.input_validator import InputValidator
from petition_site.services import init_services
from petition_site.signatures.analytics import build_report
from petition_site.signatures.visibility import public_testimonials, visible_signatory_list

logger = logging.getLogger(__name__)

init_services(app)
validator = InputValidator()


def _services():
    return current_app.extensions['petition']


def _payload():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('body', 'A JSON object is required')
    return data


@app.errorhandler(ValidationError)
def handle_validation_error(e):
    return jsonify({'error': e.reason, 'field': e.field}), 400


@app.errorhandler(DuplicateSignatureError)
def handle_duplicate_signature(e):
    return jsonify({'error': str(e), 'code': 'DUPLICATE_EMAIL'}), 409


@app.errorhandler(AuthenticationError)
def handle_authentication_error(e):
    # The message depends only on the exception class, never on the cause.
    return jsonify({'error': str(e)}), 401


@app.errorhandler(NotFoundError)
def handle_not_found(e):
    return jsonify({'error': 'Not found'}), 404


@app.errorhandler(SQLAlchemyError)
def handle_storage_error(e):
    db.session.rollback()
    logger.exception("Storage failure on %s %s", request.method, request.path)
    return jsonify({'error': 'Action failed, please try again.'}), 500


@app.route('/api/petition/sign', methods=['POST'])
def sign_petition():
    data = _payload()
    submission = validator.parse_submission(data.get('person'), data.get('record'))
    receipt = _services().signatures.submit_signature(submission)
    return jsonify({
        'person_id': receipt.person_id,
        'record_id': receipt.record_id,
        'testimonial_id': receipt.testimonial_id,
    }), 201


@app.route('/api/edit-code/request', methods=['POST'])
def request_edit_code():
    data = _payload()
    email = validator.parse_email(data.get('email'), field='email')
    message = _services().edit_codes.request_code(email, data.get('language'))
    return jsonify({'message': message})


@app.route('/api/edit-code/verify', methods=['POST'])
def verify_edit_code():
    data = _payload()
    session = _services().edit_codes.verify_code(data.get('email'), data.get('code'))
    return jsonify({
        'person': session.person.to_dict(),
        'petition_record': session.record.to_dict() if session.record is not None else None,
    })


@app.route('/api/petition/update', methods=['POST'])
def update_petition():
    data = _payload()
    person_update = validator.parse_person_update(data.get('person_updates'))
    record_update = validator.parse_record_update(data.get('record_updates'))
    _services().signatures.apply_edit(data.get('email'), data.get('code'), person_update, record_update)
    return jsonify({'success': True})


@app.route('/api/signatories', methods=['GET'])
def signatories():
    entries = visible_signatory_list(_services().repository.iter_signatures())
    return jsonify([entry.to_dict() for entry in entries])


@app.route('/api/testimonials', methods=['GET'])
def testimonials():
    repository = _services().repository
    rows = repository.list_testimonials(moderated_only=True)
    visible = public_testimonials(rows, repository.testimonial_owners(rows))
    return jsonify([testimonial.to_dict() for testimonial in visible])


@app.route('/api/stats', methods=['GET'])
def stats():
    return jsonify({'total': _services().repository.count_supporting_records()})


@app.route('/api/analytics', methods=['GET'])
def analytics():
    repository = _services().repository
    report = build_report(repository.list_persons(), repository.list_records(),
                          repository.list_testimonials())
    return jsonify(report.to_dict())


@app.route('/api/forum/threads', methods=['GET'])
def list_threads():
    return jsonify([thread.to_dict() for thread in _services().forum.list_threads()])


@app.route('/api/forum/threads', methods=['POST'])
def create_thread():
    data = _payload()
    thread = _services().forum.create_thread(
        data.get('title'), data.get('content'),
        language=data.get('language', 'EN'),
        author_name=data.get('author_name'),
    )
    return jsonify(thread.to_dict()), 201


@app.route('/api/forum/threads/<int:thread_id>/replies', methods=['POST'])
def reply_to_thread(thread_id):
    data = _payload()
    thread = _services().forum.add_reply(thread_id, data.get('content'), author_name=data.get('author_name'))
    return jsonify(thread.to_dict()), 201


@app.route('/health', methods=['GET'])
def health():
    report = check_health(db.session)
    return jsonify(report), 200 if report['overall_ok'] else 503
