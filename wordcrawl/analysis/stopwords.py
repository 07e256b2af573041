"""
Stopword loading for the text analyzer.

The stopword lists live in a YAML data file so they can be swapped or
extended without touching the analysis pipeline.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import FrozenSet, Iterable, List, Optional

import yaml


DEFAULT_STOPWORDS_FILE = Path(__file__).with_name('stopwords.yaml')

logger = logging.getLogger(__name__)


def _read_stopword_file(path: Path) -> List[str]:
    """Read every list in a stopword YAML file into one flat list."""
    with open(path, 'r', encoding='utf-8') as file:
        data = yaml.safe_load(file) or {}

    if isinstance(data, list):
        sections = {'default': data}
    elif isinstance(data, dict):
        sections = data
    else:
        raise ValueError(f"Stopword file must contain a mapping or a list: {path}")

    words = []
    for name, entries in sections.items():
        if not isinstance(entries, list):
            raise ValueError(f"Stopword section '{name}' must be a list in {path}")
        for entry in entries:
            if not isinstance(entry, str):
                raise ValueError(f"Non-string stopword {entry!r} in section '{name}' of {path}")
            words.append(entry)
    return words


def load_stopwords(path: Optional[str] = None,
                   extra: Optional[Iterable[str]] = None) -> FrozenSet[str]:
    """
    Load a stopword set.

    Args:
        path: YAML file with one or more named lists of words. The bundled
            English/Chinese lists are used when omitted.
        extra: Additional words to merge into the set.

    Returns:
        Frozen set of lowercased stopwords
    """
    source = Path(path) if path else DEFAULT_STOPWORDS_FILE
    if not source.exists():
        raise FileNotFoundError(f"Stopword file not found: {source}")

    words = {word.strip().lower() for word in _read_stopword_file(source)}
    if extra:
        words.update(word.strip().lower() for word in extra)
    words.discard('')

    logger.debug(f"Loaded {len(words)} stopwords from {source}")
    return frozenset(words)


@lru_cache(maxsize=1)
def default_stopwords() -> FrozenSet[str]:
    """Bundled English and Chinese stopwords, loaded once."""
    return load_stopwords()
