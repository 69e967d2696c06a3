# petition_site/audit/audit_logger.py

import os
import json
import hashlib
import base64
import logging
from datetime import datetime, timezone
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

logger = logging.getLogger(__name__)

# Append-only audit trail for signature and edit-code events.
# Each line is a JSON entry carrying the hash of the line before it and an
# Ed25519 signature over its own canonical form. Email addresses are only
# ever recorded as a SHA-256 digest of the normalized address.

AUDIT_FILE_NAME = 'audit.log'


def hash_email(email):
    if not email:
        return None
    return hashlib.sha256(email.strip().lower().encode()).hexdigest()


def load_signing_key(encoded):
    """Ed25519 key from base64 of its 32 raw private bytes; None when unset.

    Without a configured key every process signs with a fresh one, so
    entries written by an earlier process no longer verify.
    """
    if not encoded:
        return None
    return Ed25519PrivateKey.from_private_bytes(base64.b64decode(encoded))


def _canonical(entry):
    """Bytes that are hashed and signed: everything except hash and signature."""
    body = {key: value for key, value in entry.items() if key not in ('hash', 'signature')}
    return json.dumps(body, sort_keys=True).encode()


class AuditLogger:
    def __init__(self, log_dir='logs', signing_key=None):
        self.log_dir = log_dir
        self.log_file = os.path.join(log_dir, AUDIT_FILE_NAME)
        os.makedirs(log_dir, exist_ok=True)

        self.signing_key = signing_key or Ed25519PrivateKey.generate()
        self.previous_hash = self._last_hash()

    def _last_hash(self):
        last = None
        try:
            for entry in self.iter_entries():
                last = entry
        except ValueError:
            logger.warning("Audit log %s has an unreadable line, starting a new chain", self.log_file)
            return None
        return last.get('hash') if last else None

    def iter_entries(self):
        """Yield the decoded entries in file order; raises ValueError on a corrupt line."""
        if not os.path.exists(self.log_file):
            return
        with open(self.log_file, 'r') as f:
            for line in f:
                if line.strip():
                    yield json.loads(line)

    def log_event(self, event_type, data=None, email=None):
        """Append one event and return its hash.

        Never raises: the user operation that triggered the event must not
        fail because the trail could not be written, so errors are logged and
        None is returned.
        """
        try:
            entry = {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "event_type": event_type,
                "data": data or {},
                "subject": hash_email(email),
                "previous_hash": self.previous_hash,
            }
            payload = _canonical(entry)
            entry['hash'] = hashlib.sha256(payload).hexdigest()
            entry['signature'] = base64.b64encode(self.signing_key.sign(payload)).decode()

            with open(self.log_file, 'a') as f:
                f.write(json.dumps(entry) + "\n")
        except Exception:
            logger.exception("Audit log write failed for event %s", event_type)
            return None

        self.previous_hash = entry['hash']
        return entry['hash']

    def verify_log_integrity(self):
        """Check every entry's chain link, hash and signature."""
        public_key = self.signing_key.public_key()
        expected_previous = None
        try:
            for entry in self.iter_entries():
                if entry.get('previous_hash') != expected_previous:
                    return False
                payload = _canonical(entry)
                if hashlib.sha256(payload).hexdigest() != entry['hash']:
                    return False
                public_key.verify(base64.b64decode(entry['signature']), payload)
                expected_previous = entry['hash']
        except (ValueError, KeyError, InvalidSignature):
            return False
        return True
