"""Bookmark services: URL classification, metadata scraping, storage, caching."""
