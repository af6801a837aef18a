"""Unit tests for query cleaning, stopwords and trigram folding."""

import pytest

from crawl_search.search.analyzers import (
    DEFAULT_STOPWORDS,
    PUNCTUATION,
    AnalyzerPipeline,
    StopFilter,
    TextNormalizer,
    Token,
    TrigramFilter,
    WhitespaceTokenizer,
    clean_text,
    trigram_fold,
)


def _tokens(*texts: str) -> list[Token]:
    return [Token(text=text, position=idx, start_char=0, end_char=len(text)) for idx, text in enumerate(texts)]


class TestCleanText:
    def test_collapses_whitespace_and_newlines(self):
        assert clean_text("  red\r\n\tpanda\n\nfacts  ") == "red panda facts"

    def test_punctuation_separates_words(self):
        cleaned = clean_text("state-of-the-art")

        assert cleaned.split() == ["state", "of", "the", "art"]

    def test_every_ascii_punctuation_character_is_removed(self):
        cleaned = clean_text(f"a{PUNCTUATION}b")

        assert not any(char in cleaned for char in PUNCTUATION)
        assert cleaned.split() == ["a", "b"]

    def test_empty_input(self):
        assert clean_text("") == ""


class TestWhitespaceTokenizer:
    def test_emits_tokens_with_offsets(self):
        tokens = list(WhitespaceTokenizer()("red  panda"))

        assert [t.text for t in tokens] == ["red", "panda"]
        assert [(t.start_char, t.end_char) for t in tokens] == [(0, 3), (5, 10)]


class TestStopFilter:
    def test_default_list_removes_common_words(self):
        filtered = list(StopFilter()(_tokens("the", "red", "and", "panda")))

        assert [t.text for t in filtered] == ["red", "panda"]

    def test_custom_list_replaces_defaults(self):
        filtered = list(StopFilter(["panda"])(_tokens("the", "red", "panda")))

        assert [t.text for t in filtered] == ["the", "red"]

    def test_default_list_is_lowercase(self):
        assert all(word == word.lower() for word in DEFAULT_STOPWORDS)


class TestTrigramFold:
    def test_windows_for_every_position(self):
        assert trigram_fold(["a", "b", "c", "d", "e"]) == ["a b c", "b c d", "c d e"]

    def test_fewer_than_three_words_yield_nothing(self):
        assert trigram_fold(["a", "b"]) == []

    def test_filter_only_folds_above_threshold(self):
        short = list(TrigramFilter(threshold=3)(_tokens("a", "b", "c")))
        long = list(TrigramFilter(threshold=3)(_tokens("a", "b", "c", "d")))

        assert [t.text for t in short] == ["a", "b", "c"]
        assert [t.text for t in long] == ["a b c", "b c d"]


class TestAnalyzerPipeline:
    def test_positions_renumbered_after_filtering(self):
        pipeline = AnalyzerPipeline(WhitespaceTokenizer(), [StopFilter()])

        tokens = pipeline("the red panda")

        assert [(t.text, t.position) for t in tokens] == [("red", 0), ("panda", 1)]


class TestTextNormalizer:
    @pytest.fixture
    def normalizer(self) -> TextNormalizer:
        return TextNormalizer()

    def test_long_query_becomes_trigrams(self, normalizer):
        assert normalizer.normalize("the quick brown fox jumps") == ["quick brown fox", "brown fox jumps"]

    def test_single_word_is_unchanged(self, normalizer):
        assert normalizer.normalize("cat") == ["cat"]

    def test_three_words_are_not_folded(self, normalizer):
        assert normalizer.normalize("alpha beta gamma") == ["alpha", "beta", "gamma"]

    def test_lowercases_and_strips_punctuation(self, normalizer):
        assert normalizer.normalize("Hello, World!") == ["hello", "world"]

    def test_duplicates_are_kept(self, normalizer):
        assert normalizer.normalize("cat cat") == ["cat", "cat"]

    def test_stopword_only_query_is_empty(self, normalizer):
        assert normalizer.normalize("The AND of") == []

    def test_empty_query(self, normalizer):
        assert normalizer.normalize("   ") == []

    def test_five_content_words_give_three_trigrams(self, normalizer):
        assert normalizer("Red panda bamboo diet facts") == [
            "red panda bamboo",
            "panda bamboo diet",
            "bamboo diet facts",
        ]

    def test_stopwords_removed_before_folding(self, normalizer):
        # "of" and "the" go first, leaving exactly three words
        assert normalizer.normalize("history of the red panda") == ["history", "red", "panda"]

    def test_custom_threshold(self):
        normalizer = TextNormalizer(trigram_threshold=10)

        assert normalizer.normalize("red panda bamboo diet facts") == ["red", "panda", "bamboo", "diet", "facts"]

    def test_trigram_tokens_span_their_words(self, normalizer):
        tokens = normalizer.tokens("red panda bamboo diet")

        assert tokens[0].text == "red panda bamboo"
        assert (tokens[0].start_char, tokens[0].end_char) == (0, 16)
        assert [t.position for t in tokens] == [0, 1]
