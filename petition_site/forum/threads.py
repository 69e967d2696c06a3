# petition_site/forum/threads.py

import logging

from petition_site.constants import DEFAULT_FORUM_AUTHOR, Language
from petition_site.database.models import ForumReply, ForumThread
from petition_site.errors import NotFoundError, ValidationError
from petition_site.security.input_validator import InputValidator

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 200
MAX_POST_LENGTH = 5000


class ForumService:
    def __init__(self, repository, translations):
        self.repository = repository
        self.translations = translations
        self.validator = InputValidator()

    def _text(self, value, field, max_length):
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(field, f'{field.capitalize()} is required')
        if len(value) > max_length:
            raise ValidationError(field, f'{field.capitalize()} must be at most {max_length} characters')
        cleaned = self.validator.sanitize_string(value, max_length=max_length)
        if not cleaned:
            raise ValidationError(field, f'{field.capitalize()} is required')
        return cleaned

    def _author(self, author_name):
        if not author_name:
            return DEFAULT_FORUM_AUTHOR
        return self.validator.sanitize_string(author_name, max_length=120) or DEFAULT_FORUM_AUTHOR

    def list_threads(self):
        return self.repository.list_threads()

    def create_thread(self, title, content, language=Language.EN, author_name=None):
        title = self._text(title, 'title', MAX_TITLE_LENGTH)
        content = self._text(content, 'content', MAX_POST_LENGTH)
        language = self.validator.parse_language(language, field='language')
        summary = self.translations.summarize(content, [])

        thread = ForumThread(title=title, author_name=self._author(author_name), content=content,
                             ai_summary=summary, language=language.value)
        with self.repository.transaction():
            self.repository.add_thread(thread)
        logger.info("Forum thread %s created", thread.id)
        return thread

    def add_reply(self, thread_id, content, author_name=None):
        thread = self.repository.get_thread(thread_id)
        if thread is None:
            raise NotFoundError(f"Thread {thread_id} not found")
        content = self._text(content, 'content', MAX_POST_LENGTH)

        replies = [reply.content for reply in thread.replies] + [content]
        # Keep the previous summary if the provider cannot produce a new one.
        summary = self.translations.summarize(thread.content, replies, fallback=thread.ai_summary)

        with self.repository.transaction():
            self.repository.add_reply(thread, ForumReply(author_name=self._author(author_name), content=content))
            self.repository.update_thread(thread, ai_summary=summary)
        return thread
