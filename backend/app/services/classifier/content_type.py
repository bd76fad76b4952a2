"""Platform/path -> content type."""

from app.models.bookmark import ContentType
from app.services.classifier.platforms import PLATFORM_TO_CONTENT_TYPE


def is_pdf_path(path: str) -> bool:
    return path.lower().endswith(".pdf")


def resolve_content_type(platform: str, path: str) -> ContentType:
    """PDF paths win over platform grouping, so a PDF on a CDN is a document."""
    if is_pdf_path(path):
        return ContentType.DOCUMENT
    return PLATFORM_TO_CONTENT_TYPE.get(platform, ContentType.ARTICLE)
