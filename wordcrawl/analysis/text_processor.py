"""
Word frequency analysis for mixed Latin/CJK page text.
"""

import re
from dataclasses import dataclass
from typing import AbstractSet, Dict, Iterable, List, Optional

from .stopwords import default_stopwords


URL_PATTERN = re.compile(r'https?://\S+')
EMAIL_PATTERN = re.compile(r'\S+@\S+')
NON_WORD_PATTERN = re.compile(r'[^\u4e00-\u9fffa-z\s]')
WHITESPACE_PATTERN = re.compile(r'\s+')

LATIN_WORD_PATTERN = re.compile(r'[a-z]{2,}', re.IGNORECASE)
CJK_CHAR_PATTERN = re.compile(r'[\u4e00-\u9fff]')


@dataclass(frozen=True)
class WordFrequency:
    """A word and how many times it occurred."""
    text: str
    value: int

    def to_dict(self) -> dict:
        return {'text': self.text, 'value': self.value}


def clean_text(text: str) -> str:
    """
    Lowercase text and strip everything that is not a word.

    URLs and email addresses are removed first; any character that is not a
    Latin letter, a CJK ideograph or whitespace becomes a space.
    """
    cleaned = text.lower()
    cleaned = URL_PATTERN.sub('', cleaned)
    cleaned = EMAIL_PATTERN.sub('', cleaned)
    cleaned = NON_WORD_PATTERN.sub(' ', cleaned)
    return WHITESPACE_PATTERN.sub(' ', cleaned).strip()


def tokenize(text: str) -> List[str]:
    """Split text into Latin words followed by single CJK characters."""
    tokens = LATIN_WORD_PATTERN.findall(text)
    # No CJK word segmentation: every ideograph is a token of its own.
    tokens.extend(CJK_CHAR_PATTERN.findall(text))
    return tokens


def filter_stopwords(tokens: Iterable[str],
                     stopwords: Optional[AbstractSet[str]] = None) -> List[str]:
    """Drop stopwords and tokens of a single character."""
    if stopwords is None:
        stopwords = default_stopwords()
    return [
        token for token in tokens
        if token.lower() not in stopwords and len(token) > 1
    ]


def count_word_frequency(tokens: Iterable[str]) -> Dict[str, int]:
    """Count lowercased tokens, keyed in order of first occurrence."""
    frequency: Dict[str, int] = {}
    for token in tokens:
        key = token.lower()
        frequency[key] = frequency.get(key, 0) + 1
    return frequency


def get_top_words(text: str, top_n: int = 100, min_frequency: int = 2,
                  stopwords: Optional[AbstractSet[str]] = None) -> List[WordFrequency]:
    """
    Rank the significant words of a text by frequency.

    Args:
        text: Raw text to analyze
        top_n: Maximum number of words returned
        min_frequency: Words seen fewer times are dropped (<= 0 disables)
        stopwords: Stopword set, the bundled lists when omitted

    Returns:
        WordFrequency list sorted by count descending; equal counts keep
        the order in which the words first appeared
    """
    if top_n <= 0:
        return []

    tokens = tokenize(clean_text(text))
    frequency = count_word_frequency(filter_stopwords(tokens, stopwords))

    ranked = sorted(
        (WordFrequency(text=word, value=count)
         for word, count in frequency.items() if count >= min_frequency),
        key=lambda word: word.value,
        reverse=True
    )
    return ranked[:top_n]


def analyze(texts: Iterable[str], top_n: int = 100, min_frequency: int = 2,
            stopwords: Optional[AbstractSet[str]] = None) -> List[WordFrequency]:
    """Rank words across several documents; counts are pooled, not per-document."""
    combined_text = ' '.join(texts)
    return get_top_words(combined_text, top_n, min_frequency, stopwords)
