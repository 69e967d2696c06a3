from unittest.mock import patch

import pytest
import requests

from petition_site.constants import Language, SUMMARY_UNAVAILABLE
from petition_site.errors import TranslationError
from petition_site.translation.gemini import GeminiTranslator
from petition_site.translation.orchestrator import TranslationOrchestrator


def _gemini_reply(mock_post, text, status=200):
    mock_post.return_value.status_code = status
    mock_post.return_value.json.return_value = {
        "candidates": [{"content": {"parts": [{"text": text}]}}]
    }


class TestOrchestrator:
    def test_french_comment_gets_english_translation(self, translator):
        translator.language = 'FR'
        result = TranslationOrchestrator(translator).ensure_bilingual("Merci")

        assert result.language is Language.FR
        assert result.target is Language.EN
        assert result.comment_fr == "Merci"
        assert result.comment_en == "[EN] Merci"
        assert result.degraded is False

    def test_detection_failure_assumes_primary_language(self, translator):
        translator.fail_detect = True
        result = TranslationOrchestrator(translator, primary_language=Language.FR).ensure_bilingual("Hello")

        assert result.language is Language.FR
        assert result.translated == "[EN] Hello"
        assert result.degraded is True

    def test_translation_failure_keeps_original(self, translator):
        translator.fail_translate = True
        result = TranslationOrchestrator(translator).ensure_bilingual("Hello")

        assert result.translated == "Hello"
        assert result.comment_en == result.comment_fr == "Hello"
        assert result.degraded is True

    def test_empty_translation_counts_as_failure(self, translator, monkeypatch):
        monkeypatch.setattr(translator, 'translate', lambda text, source, target: "")
        result = TranslationOrchestrator(translator).ensure_bilingual("Hello")

        assert result.translated == "Hello"
        assert result.degraded is True

    def test_unsupported_language_is_coerced(self, translator):
        orchestrator = TranslationOrchestrator(translator)
        assert orchestrator.coerce_language("de") is Language.EN
        assert orchestrator.coerce_language(" fr\n") is Language.FR

    def test_summary_falls_back(self, translator):
        orchestrator = TranslationOrchestrator(translator)
        assert orchestrator.summarize("Post", ["a", "b"]) == "Summary: 2 replies"

        translator.fail_summarize = True
        assert orchestrator.summarize("Post", []) == SUMMARY_UNAVAILABLE
        assert orchestrator.summarize("Post", [], fallback="Old summary") == "Old summary"


class TestGeminiTranslator:
    @patch("petition_site.translation.gemini.requests.post")
    def test_translate_posts_prompt(self, mock_post):
        _gemini_reply(mock_post, "  Thank you  ")

        result = GeminiTranslator("key-123").translate("Merci", Language.FR, Language.EN)

        assert result == "Thank you"
        _, kwargs = mock_post.call_args
        assert kwargs['params'] == {"key": "key-123"}
        prompt = kwargs['json']['contents'][0]['parts'][0]['text']
        assert "from FR to EN" in prompt
        assert prompt.endswith("Text: Merci")

    @patch("petition_site.translation.gemini.requests.post")
    def test_same_language_skips_the_call(self, mock_post):
        assert GeminiTranslator("key").translate("Hello", 'EN', 'EN') == "Hello"
        mock_post.assert_not_called()

    @patch("petition_site.translation.gemini.requests.post")
    def test_detect_language_is_uppercased(self, mock_post):
        _gemini_reply(mock_post, "fr\n")
        assert GeminiTranslator("key").detect_language("Bonjour") == "FR"

    @patch("petition_site.translation.gemini.requests.post")
    def test_http_error_raises(self, mock_post):
        _gemini_reply(mock_post, "ignored", status=500)
        with pytest.raises(TranslationError):
            GeminiTranslator("key").translate("Hello", 'EN', 'FR')

    @patch("petition_site.translation.gemini.requests.post")
    def test_transport_error_raises(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("offline")
        with pytest.raises(TranslationError):
            GeminiTranslator("key").summarize("Post", [])

    @patch("petition_site.translation.gemini.requests.post")
    def test_malformed_response_raises(self, mock_post):
        mock_post.return_value.status_code = 200
        mock_post.return_value.json.return_value = {"candidates": []}
        with pytest.raises(TranslationError):
            GeminiTranslator("key").detect_language("Hello")

    @patch("petition_site.translation.gemini.requests.post")
    def test_missing_key_raises_without_calling(self, mock_post):
        with pytest.raises(TranslationError):
            GeminiTranslator("").translate("Hello", 'EN', 'FR')
        mock_post.assert_not_called()
