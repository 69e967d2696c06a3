# petition_site/database/repository.py

from contextlib import contextmanager

from petition_site.database.models import (
    AuthToken, ForumThread, Person, PetitionRecord, Testimonial,
)


class PetitionRepository:
    """Thin data access over a SQLAlchemy session.

    Mutating methods only flush. Callers group them inside ``transaction()``,
    which commits on success and rolls everything back on any error, so a
    multi-row write is never half applied.
    """

    def __init__(self, session):
        self.session = session

    @contextmanager
    def transaction(self):
        try:
            yield self
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    def _apply(self, row, fields):
        for name, value in fields.items():
            setattr(row, name, value)
        self.session.flush()
        return row

    # Persons

    def get_person_by_email(self, email):
        return self.session.query(Person).filter_by(email_address=email).first()

    def list_persons(self):
        return self.session.query(Person).order_by(Person.created_at).all()

    def add_person(self, person):
        self.session.add(person)
        self.session.flush()
        return person

    def update_person(self, person, **fields):
        return self._apply(person, fields)

    # Petition records

    def get_record_for_person(self, person_id):
        return self.session.query(PetitionRecord).filter_by(person_id=person_id).first()

    def list_records(self):
        return self.session.query(PetitionRecord).all()

    def count_supporting_records(self):
        return self.session.query(PetitionRecord).filter_by(petition_support=True).count()

    def add_record(self, record):
        self.session.add(record)
        self.session.flush()
        return record

    def update_record(self, record, **fields):
        return self._apply(record, fields)

    # Testimonials

    def list_testimonials(self, moderated_only=False):
        query = self.session.query(Testimonial)
        if moderated_only:
            query = query.filter_by(is_moderated=True)
        return query.order_by(Testimonial.created_at.desc(), Testimonial.id.desc()).all()

    def find_testimonial_for(self, person):
        testimonial = (self.session.query(Testimonial)
                       .filter_by(person_id=person.id)
                       .order_by(Testimonial.created_at.desc())
                       .first())
        if testimonial is not None:
            return testimonial
        # Older rows were matched on display name only.
        return (self.session.query(Testimonial)
                .filter(Testimonial.person_id.is_(None), Testimonial.person_name == person.full_name)
                .order_by(Testimonial.created_at.desc())
                .first())

    def add_testimonial(self, testimonial):
        self.session.add(testimonial)
        self.session.flush()
        return testimonial

    def update_testimonial(self, testimonial, **fields):
        return self._apply(testimonial, fields)

    def testimonial_owners(self, testimonials):
        """Map testimonial id -> (person, record) for every resolvable author."""
        persons = self.list_persons()
        by_id = {person.id: person for person in persons}
        by_name = {}
        for person in persons:
            by_name.setdefault(person.full_name, person)
        records = {record.person_id: record for record in self.list_records()}

        owners = {}
        for testimonial in testimonials:
            if testimonial.person_id is not None:
                person = by_id.get(testimonial.person_id)
            else:
                person = by_name.get(testimonial.person_name)
            if person is not None:
                owners[testimonial.id] = (person, records.get(person.id))
        return owners

    def iter_signatures(self):
        """Yield (person, record, testimonial or None) for every signer."""
        rows = (self.session.query(Person, PetitionRecord)
                .join(PetitionRecord, PetitionRecord.person_id == Person.id)
                .all())
        by_owner, by_name = index_testimonials(self.list_testimonials())
        for person, record in rows:
            yield person, record, by_owner.get(person.id) or by_name.get(person.full_name)

    # Auth tokens

    def add_auth_token(self, token):
        self.session.add(token)
        self.session.flush()
        return token

    def find_valid_token(self, email, code, now):
        # Several codes may be outstanding for one email; any match is accepted.
        return (self.session.query(AuthToken)
                .filter(AuthToken.email == email,
                        AuthToken.token == code,
                        AuthToken.used.is_(False),
                        AuthToken.expires_at > now)
                .first())

    def mark_token_used(self, token_id):
        token = self.session.get(AuthToken, token_id)
        if token is not None:
            token.used = True
            self.session.flush()
        return token

    # Forum

    def list_threads(self):
        return self.session.query(ForumThread).order_by(ForumThread.created_at.desc(), ForumThread.id.desc()).all()

    def get_thread(self, thread_id):
        return self.session.get(ForumThread, thread_id)

    def add_thread(self, thread):
        self.session.add(thread)
        self.session.flush()
        return thread

    def add_reply(self, thread, reply):
        thread.replies.append(reply)
        self.session.flush()
        return reply

    def update_thread(self, thread, **fields):
        return self._apply(thread, fields)


def index_testimonials(testimonials):
    """Index testimonials by owner id, and by name for rows without an owner.

    When several rows share a key the most recent one wins.
    """
    by_owner, by_name = {}, {}
    for testimonial in sorted(testimonials, key=lambda t: (t.created_at, t.id or 0)):
        if testimonial.person_id is not None:
            by_owner[testimonial.person_id] = testimonial
        else:
            by_name[testimonial.person_name] = testimonial
    return by_owner, by_name
