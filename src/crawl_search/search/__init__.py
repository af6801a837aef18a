"""
Search query and ranking package.

This package provides the read side of crawl search:
- analyzers: Query cleaning, tokenization, stopwords and trigram folding
- ranking: Row-level relevance scoring with a query-wide IDF
- hydration: Ordered, de-duplicated id to document resolution
- suggestions: Phrase suggestions from the full-text index
"""
