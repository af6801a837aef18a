"""Text search and ranking over a web-crawl store."""

from crawl_search.service_layer.search_service import SearchService


__all__ = ["SearchService"]
