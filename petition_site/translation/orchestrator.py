# petition_site/translation/orchestrator.py

import logging
from dataclasses import dataclass

from petition_site.constants import Language, SUMMARY_UNAVAILABLE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BilingualText:
    original: str
    translated: str
    language: Language
    degraded: bool = False

    @property
    def target(self):
        return self.language.other

    @property
    def comment_en(self):
        return self.original if self.language is Language.EN else self.translated

    @property
    def comment_fr(self):
        return self.original if self.language is Language.FR else self.translated


class TranslationOrchestrator:
    """Best-effort bilingual enrichment of free text.

    Provider failures never reach the caller: detection falls back to the
    primary language and translation falls back to the original text, with a
    warning logged for each degradation.
    """

    def __init__(self, translator, primary_language=Language.EN):
        self.translator = translator
        self.primary_language = Language(primary_language)

    def coerce_language(self, value):
        if isinstance(value, Language):
            return value
        try:
            return Language(str(value).strip().upper()[:2])
        except ValueError:
            return self.primary_language

    def detect(self, text):
        try:
            return self.coerce_language(self.translator.detect_language(text)), False
        except Exception:
            logger.warning("Language detection failed, assuming %s", self.primary_language.value, exc_info=True)
            return self.primary_language, True

    def ensure_bilingual(self, comment):
        language, degraded = self.detect(comment)
        try:
            translated = self.translator.translate(comment, language, language.other)
        except Exception:
            logger.warning("Translation %s->%s failed, keeping original text",
                           language.value, language.other.value, exc_info=True)
            translated = None
        if not translated:
            translated, degraded = comment, True
        return BilingualText(original=comment, translated=translated, language=language, degraded=degraded)

    def summarize(self, content, replies, fallback=SUMMARY_UNAVAILABLE):
        try:
            summary = self.translator.summarize(content, list(replies))
        except Exception:
            logger.warning("Thread summary failed", exc_info=True)
            return fallback
        return summary or fallback
