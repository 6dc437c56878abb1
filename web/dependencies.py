"""Reusable FastAPI dependencies."""
from fastapi import Depends

from web.config import Settings, get_settings as _get_settings
from web.services.docx_report import EvaluationDocumentGenerator
from web.services.repository import InMemoryEvaluationStore, evaluation_store


def get_settings() -> Settings:
    """Return application settings (cached)."""
    return _get_settings()


def get_store() -> InMemoryEvaluationStore:
    """Return the record store shared by all requests."""
    return evaluation_store


def get_document_generator(settings: Settings = Depends(get_settings)) -> EvaluationDocumentGenerator:
    """Build a report generator configured from the current settings."""
    return EvaluationDocumentGenerator(settings=settings)
