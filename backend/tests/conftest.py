"""Shared fixtures: every test starts from fresh settings and singletons."""

import pytest

from app.config import reset_settings
from app.services.bookmark_service import reset_bookmark_service
from app.services.cache import reset_bookmark_cache
from app.services.classifier import reset_url_classifier
from app.services.metadata_extractor import reset_metadata_extractor


@pytest.fixture(autouse=True)
def _reset_singletons(monkeypatch):
    # Never pick up a developer's real key or Supabase project
    monkeypatch.setenv("YOUTUBE_API_KEY", "")
    monkeypatch.setenv("SUPABASE_URL", "")
    monkeypatch.setenv("SUPABASE_SERVICE_KEY", "")
    reset_settings()
    reset_url_classifier()
    reset_metadata_extractor()
    reset_bookmark_cache()
    reset_bookmark_service()
    yield
    reset_settings()
    reset_url_classifier()
    reset_metadata_extractor()
    reset_bookmark_cache()
    reset_bookmark_service()
