# petition_site/__init__.py

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from werkzeug.middleware.proxy_fix import ProxyFix
import logging
import os


def _env_flag(name, default):
    return os.environ.get(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


logging.basicConfig(
    level=os.environ.get('LOG_LEVEL', 'INFO').upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

app = Flask(__name__)
app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'change-me-in-production')
app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get('DATABASE_URL', 'sqlite:///petition.db')
app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

# Edit-code (one-time code) settings
app.config['EDIT_CODE_TTL_MINUTES'] = int(os.environ.get('EDIT_CODE_TTL_MINUTES', '15'))

# Translation / testimonial settings
app.config['PRIMARY_LANGUAGE'] = os.environ.get('PRIMARY_LANGUAGE', 'EN').upper()
app.config['TESTIMONIAL_AUTO_MODERATE'] = _env_flag('TESTIMONIAL_AUTO_MODERATE', 'true')
app.config['GEMINI_API_KEY'] = os.environ.get('GEMINI_API_KEY', '')
app.config['GEMINI_MODEL'] = os.environ.get('GEMINI_MODEL', 'gemini-2.0-flash')

# Outgoing email
app.config['RESEND_API_KEY'] = os.environ.get('RESEND_API_KEY', '')
app.config['MAIL_FROM'] = os.environ.get('MAIL_FROM', 'Fulham Bilingual <noreply@fulhambilingual.org>')

app.config['AUDIT_LOG_DIR'] = os.environ.get('AUDIT_LOG_DIR', 'logs')
# base64 of a raw Ed25519 private key; keeps the audit chain verifiable across restarts
app.config['AUDIT_SIGNING_KEY'] = os.environ.get('AUDIT_SIGNING_KEY', '')

# Fix proxy headers for HTTPS
app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

# Initialize extensions
db = SQLAlchemy(app)  # Database ORM
migrate = Migrate(app, db)  # `flask db init` creates migrations/ at the project root


# Ensure model modules are imported so SQLAlchemy metadata is populated
# This makes models discoverable by Flask-Migrate / Alembic when running
# `flask db migrate`.
from petition_site.database import models  # noqa: F401,E402

from petition_site import routes  # noqa: F401,E402
from petition_site import commands  # noqa: F401,E402
