# petition_site/database/models.py

from datetime import datetime, timezone

from petition_site import db
from petition_site.constants import Language


def utcnow():
    # Naive UTC, the same shape the DateTime columns hand back.
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _iso(value):
    return value.isoformat() if value else None


class Person(db.Model):
    __tablename__ = 'persons'
    id = db.Column(db.Integer, primary_key=True)
    full_name = db.Column(db.String(120), nullable=False)
    email_address = db.Column(db.String(254), unique=True, nullable=False)  # always lowercase + trimmed
    relationship_to_school = db.Column(db.JSON, nullable=False, default=list)
    student_year_groups = db.Column(db.JSON, nullable=False, default=list)
    submission_language = db.Column(db.String(2), nullable=False, default=Language.EN.value)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    @property
    def language(self):
        return Language(self.submission_language)

    def to_dict(self):
        return {
            'id': self.id,
            'full_name': self.full_name,
            'email_address': self.email_address,
            'relationship_to_school': list(self.relationship_to_school or []),
            'student_year_groups': list(self.student_year_groups or []),
            'submission_language': self.submission_language,
            'created_at': _iso(self.created_at),
        }

    def __repr__(self):
        return f'<Person {self.id}>'


class PetitionRecord(db.Model):
    __tablename__ = 'petition_records'
    id = db.Column(db.Integer, primary_key=True)
    person_id = db.Column(db.Integer, db.ForeignKey('persons.id'), unique=True, nullable=False)
    petition_support = db.Column(db.Boolean, nullable=False, default=True)
    supporting_comment = db.Column(db.Text, nullable=True)
    consent_public_use = db.Column(db.Boolean, nullable=False, default=False)
    submission_timestamp = db.Column(db.DateTime, default=utcnow, nullable=False)
    comment_en = db.Column(db.Text, nullable=True)
    comment_fr = db.Column(db.Text, nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'person_id': self.person_id,
            'petition_support': self.petition_support,
            'supporting_comment': self.supporting_comment,
            'consent_public_use': self.consent_public_use,
            'submission_timestamp': _iso(self.submission_timestamp),
            'comment_en': self.comment_en,
            'comment_fr': self.comment_fr,
        }

    def __repr__(self):
        return f'<PetitionRecord {self.id} for Person {self.person_id}>'


class Testimonial(db.Model):
    __tablename__ = 'testimonials'
    id = db.Column(db.Integer, primary_key=True)
    # Rows written before the owner column existed only carry person_name.
    person_id = db.Column(db.Integer, db.ForeignKey('persons.id'), nullable=True, index=True)
    person_name = db.Column(db.String(120), nullable=False)
    content = db.Column(db.Text, nullable=False)
    content_translated = db.Column(db.Text, nullable=True)
    image_url = db.Column(db.String(500), nullable=True)
    is_moderated = db.Column(db.Boolean, nullable=False, default=False)
    language = db.Column(db.String(2), nullable=False, default=Language.EN.value)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'person_name': self.person_name,
            'content': self.content,
            'content_translated': self.content_translated,
            'image_url': self.image_url,
            'is_moderated': self.is_moderated,
            'language': self.language,
            'created_at': _iso(self.created_at),
        }

    def __repr__(self):
        return f'<Testimonial {self.id} by {self.person_name}>'


class ForumThread(db.Model):
    __tablename__ = 'forum_threads'
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    author_name = db.Column(db.String(120), nullable=False)
    content = db.Column(db.Text, nullable=False)
    ai_summary = db.Column(db.Text, nullable=True)
    language = db.Column(db.String(2), nullable=False, default=Language.EN.value)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    replies = db.relationship('ForumReply', backref='thread', lazy=True,
                              order_by='ForumReply.id', cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'author_name': self.author_name,
            'content': self.content,
            'ai_summary': self.ai_summary,
            'language': self.language,
            'created_at': _iso(self.created_at),
            'replies': [reply.to_dict() for reply in self.replies],
        }


class ForumReply(db.Model):
    __tablename__ = 'forum_replies'
    id = db.Column(db.Integer, primary_key=True)
    thread_id = db.Column(db.Integer, db.ForeignKey('forum_threads.id'), nullable=False)
    author_name = db.Column(db.String(120), nullable=False)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'author_name': self.author_name,
            'content': self.content,
            'created_at': _iso(self.created_at),
        }


class AuthToken(db.Model):
    """One-time edit code. Looked up by email, not linked to Person."""

    __tablename__ = 'auth_tokens'
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(254), nullable=False, index=True)
    token = db.Column(db.String(6), nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)
    used = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        state = 'used' if self.used else 'unused'
        return f'<AuthToken {self.id} - {state}>'
