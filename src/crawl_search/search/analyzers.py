"""Query analyzers for crawl search.

Queries go through a small composable tokenizer/filter pipeline: clean the
raw text, split it on whitespace, drop stopwords, then fold long queries into
overlapping trigrams. The output is the exact term form stored in the token
index, so anything changed here must match the index builder.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
import re
from typing import Protocol


@dataclass
class Token:
    """Represents a token emitted by analyzers."""

    text: str
    position: int
    start_char: int
    end_char: int


class Tokenizer(Protocol):
    """Protocol implemented by tokenizers."""

    def __call__(self, text: str) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class TokenFilter(Protocol):
    """Protocol implemented by token filters."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


PUNCTUATION = "!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~"

_WHITESPACE = re.compile(r"\s+")
_PUNCTUATION = re.compile(f"[{re.escape(PUNCTUATION)}]")


def clean_text(text: str) -> str:
    """Collapse whitespace, turn ASCII punctuation into separators and trim."""
    collapsed = _WHITESPACE.sub(" ", text)
    return _PUNCTUATION.sub(" ", collapsed).strip()


class WhitespaceTokenizer:
    """Splits text on whitespace runs, skipping empty pieces."""

    _pattern = re.compile(r"\S+")

    def __call__(self, text: str) -> Iterator[Token]:
        for position, match in enumerate(self._pattern.finditer(text)):
            yield Token(
                text=match.group(0),
                position=position,
                start_char=match.start(),
                end_char=match.end(),
            )


# English list used by the crawler's index builder; keep in sync with it.
DEFAULT_STOPWORDS = (
    "a",
    "about",
    "after",
    "all",
    "also",
    "am",
    "an",
    "and",
    "another",
    "any",
    "are",
    "as",
    "at",
    "be",
    "because",
    "been",
    "before",
    "being",
    "between",
    "both",
    "but",
    "by",
    "came",
    "can",
    "come",
    "could",
    "did",
    "do",
    "each",
    "for",
    "from",
    "get",
    "got",
    "had",
    "has",
    "have",
    "he",
    "her",
    "here",
    "him",
    "himself",
    "his",
    "how",
    "i",
    "if",
    "in",
    "into",
    "is",
    "it",
    "like",
    "make",
    "many",
    "me",
    "might",
    "more",
    "most",
    "much",
    "must",
    "my",
    "never",
    "now",
    "of",
    "on",
    "only",
    "or",
    "other",
    "our",
    "out",
    "over",
    "said",
    "same",
    "see",
    "should",
    "since",
    "some",
    "still",
    "such",
    "take",
    "than",
    "that",
    "the",
    "their",
    "them",
    "then",
    "there",
    "these",
    "they",
    "this",
    "those",
    "through",
    "to",
    "too",
    "under",
    "up",
    "very",
    "was",
    "way",
    "we",
    "well",
    "were",
    "what",
    "where",
    "which",
    "while",
    "who",
    "with",
    "would",
    "you",
    "your",
)


class StopFilter:
    """Removes stopwords from the stream."""

    def __init__(self, stopwords: Sequence[str] | None = None) -> None:
        vocab = stopwords if stopwords is not None else DEFAULT_STOPWORDS
        self.stopwords = {word.lower() for word in vocab}

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if token.text not in self.stopwords:
                yield token


def trigram_fold(words: Sequence[str]) -> list[str]:
    """Return every window of three consecutive words joined by a space."""
    return [" ".join(word for word in words[idx : idx + 3] if word) for idx in range(len(words) - 2)]


class TrigramFilter:
    """Folds the stream into sliding trigrams once it exceeds ``threshold`` tokens.

    Shorter streams pass through untouched.
    """

    def __init__(self, threshold: int = 3) -> None:
        self.threshold = threshold

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        buffered = list(tokens)
        if len(buffered) <= self.threshold:
            yield from buffered
            return

        texts = trigram_fold([token.text for token in buffered])
        for idx, text in enumerate(texts):
            yield Token(
                text=text,
                position=idx,
                start_char=buffered[idx].start_char,
                end_char=buffered[idx + 2].end_char,
            )


class AnalyzerPipeline:
    """Composable analyzer pipeline (tokenizer + filters)."""

    def __init__(self, tokenizer: Tokenizer, filters: Sequence[TokenFilter] | None = None) -> None:
        self.tokenizer = tokenizer
        self.filters = list(filters or [])

    def __call__(self, text: str) -> list[Token]:
        stream: Iterable[Token] = self.tokenizer(text)
        for token_filter in self.filters:
            stream = token_filter(stream)
        tokens = list(stream)
        for idx, token in enumerate(tokens):  # normalize positions post-filtering
            token.position = idx
        return tokens


class TextNormalizer:
    """Turns a raw query into the ordered term list used against the token index.

    Duplicate terms are kept: a term repeated in the query counts once per
    repetition when scoring.
    """

    def __init__(
        self,
        *,
        stopwords: Sequence[str] | None = None,
        trigram_threshold: int = 3,
    ) -> None:
        self.pipeline = AnalyzerPipeline(
            WhitespaceTokenizer(),
            [StopFilter(stopwords), TrigramFilter(trigram_threshold)],
        )

    def tokens(self, raw: str) -> list[Token]:
        """Return analyzed tokens with offsets into the cleaned text."""
        return self.pipeline(clean_text(raw.lower()))

    def normalize(self, raw: str) -> list[str]:
        return [token.text for token in self.tokens(raw)]

    def __call__(self, raw: str) -> list[str]:
        return self.normalize(raw)
