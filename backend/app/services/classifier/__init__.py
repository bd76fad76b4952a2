"""URL classification package.

Re-exports the public API so consumers can use::

    from app.services.classifier import classify_url, get_url_classifier
"""

from app.services.classifier.classifier import (
    UrlClassifier,
    classify_url,
    get_url_classifier,
    reset_url_classifier,
)

__all__ = [
    "UrlClassifier",
    "classify_url",
    "get_url_classifier",
    "reset_url_classifier",
]
