"""
Tests for edit distance and wake word matching on transcripts.
"""
import pytest

from core.audio.vad import DetectorConfig
from core.errors import ConfigurationError
from core.wakeword import KNOWN_CONFUSIONS, WakeWordMatcher, levenshtein_distance


class TestLevenshteinDistance:

    @pytest.mark.parametrize("text", ["", "a", "yo", "hello world"])
    def test_identity(self, text):
        assert levenshtein_distance(text, text) == 0

    @pytest.mark.parametrize("a,b", [("kitten", "sitting"), ("yo", "you"), ("", "abc"), ("flaw", "lawn")])
    def test_symmetric(self, a, b):
        assert levenshtein_distance(a, b) == levenshtein_distance(b, a)

    def test_single_substitution(self):
        assert levenshtein_distance("yo", "y0") == 1
        assert levenshtein_distance("computer", "computar") == 1

    def test_known_distances(self):
        assert levenshtein_distance("kitten", "sitting") == 3
        assert levenshtein_distance("", "abc") == 3
        assert levenshtein_distance("yo", "yoo") == 1
        assert levenshtein_distance("hello", "yo") == 4

    def test_unicode_scalars(self):
        assert levenshtein_distance("café", "cafe") == 1
        assert levenshtein_distance("naïve", "naive") == 1


class TestWakeWordMatcher:

    @pytest.fixture
    def matcher(self):
        return WakeWordMatcher("yo")

    @pytest.mark.parametrize("text", ["yo", "YO", "hey yo what's up", "Yo, assistant"])
    def test_exact_containment(self, matcher, text):
        assert matcher.matches(text) is True

    def test_single_character_error(self, matcher):
        assert matcher.matches("y0") is True
        assert matcher.matches("hey ya there") is True

    @pytest.mark.parametrize("text", ["hello there", "", "good morning", "a b c"])
    def test_no_match(self, matcher, text):
        assert matcher.matches(text) is False

    @pytest.mark.parametrize("text", ["you", "yeah", "Thank you", "yeah okay"])
    def test_known_confusions(self, text):
        # Zero distance tolerance: only the confusion set can match these
        matcher = WakeWordMatcher("yo", max_edit_distance=0)
        assert matcher.matches(text) is True

    def test_short_words_skip_edit_distance(self):
        matcher = WakeWordMatcher("ab", confusions=())
        assert matcher.matches("a") is False
        assert matcher.matches("ax") is True

    def test_custom_phrase_has_no_default_confusions(self):
        matcher = WakeWordMatcher("Computer")
        assert matcher.activation_word == "computer"
        assert matcher.confusions == ()
        assert matcher.matches("hey computr") is True
        assert matcher.matches("you there") is False

    def test_custom_confusions(self):
        matcher = WakeWordMatcher("jarvis", confusions=["Travis"])
        assert matcher.matches("hey travis") is True

    @pytest.mark.parametrize("phrase", ["", "   ", None])
    def test_empty_phrase_rejected(self, phrase):
        with pytest.raises(ConfigurationError):
            WakeWordMatcher(phrase)

    def test_from_config(self):
        matcher = WakeWordMatcher.from_config(DetectorConfig(activation_word="Yo", max_edit_distance=0))
        assert matcher.activation_word == "yo"
        assert matcher.max_edit_distance == 0
        assert matcher.confusions == KNOWN_CONFUSIONS["yo"]
