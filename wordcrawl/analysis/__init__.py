"""
Text analysis: cleaning, tokenization and word frequency ranking.
"""

from .stopwords import load_stopwords, default_stopwords
from .text_processor import (
    WordFrequency, analyze, clean_text, tokenize, filter_stopwords,
    count_word_frequency, get_top_words
)

__all__ = [
    'WordFrequency', 'analyze', 'clean_text', 'tokenize', 'filter_stopwords',
    'count_word_frequency', 'get_top_words',
    'load_stopwords', 'default_stopwords'
]
