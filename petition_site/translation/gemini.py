# petition_site/translation/gemini.py
"""Gemini-backed translation, language detection and thread summaries.

All three calls go through the ``generateContent`` REST endpoint. Any
transport error, non-200 status or unexpected response shape is raised as
``TranslationError``; deciding what to fall back to is the caller's job
(see ``TranslationOrchestrator``).
"""

import logging
import requests

from petition_site.constants import Language
from petition_site.errors import TranslationError

logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"


class GeminiTranslator:
    def __init__(self, api_key, model="gemini-2.0-flash", timeout=20):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    def _generate(self, prompt):
        if not self.api_key:
            raise TranslationError("Gemini API key is not configured")
        try:
            response = requests.post(
                GEMINI_URL.format(model=self.model),
                params={"key": self.api_key},
                json={"contents": [{"parts": [{"text": prompt}]}]},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TranslationError(f"Gemini request failed: {e}") from e

        if response.status_code != 200:
            raise TranslationError(f"Gemini returned HTTP {response.status_code}")
        try:
            text = response.json()["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise TranslationError(f"Unexpected Gemini response: {e}") from e
        text = (text or "").strip()
        if not text:
            raise TranslationError("Gemini returned an empty response")
        return text

    def translate(self, text, source, target):
        source, target = Language(source), Language(target)
        if not text or source is target:
            return text
        return self._generate(
            f"Translate the following text from {source.value} to {target.value}. "
            "Preserve the tone and meaning accurately. Do not include any meta-talk, "
            f"just the translation.\n\nText: {text}"
        )

    def detect_language(self, text):
        answer = self._generate(
            'Detect the language of the following text. Respond with ONLY "EN" or "FR". '
            f'If it\'s another language, choose the closest one or "EN".\n\nText: {text}'
        )
        return answer.upper()

    def summarize(self, content, replies):
        thread = "Main Post: {}\n\nReplies:\n{}".format(content, "\n".join(replies))
        return self._generate(
            "Summarize this forum thread in 2-3 concise sentences for a parent community. "
            f"Focus on the main sentiment and key points discussed.\n\nThread:\n{thread}"
        )
