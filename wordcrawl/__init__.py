"""
wordcrawl

Crawls a handful of web pages and ranks the words they use, for word clouds.
"""

__version__ = "1.0.0"
__description__ = "Bounded web crawler and word frequency analyzer for word clouds"
