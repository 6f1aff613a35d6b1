"""FastAPI dependencies for the generation pipeline collaborators."""
from __future__ import annotations

from functools import lru_cache

from app.core.config import settings
from app.services.llm_client import ModelClient
from app.services.roadmap_generator import Dispatcher
from app.worker.background import submit_background


@lru_cache
def _default_model_client() -> ModelClient:
    return ModelClient.from_settings(settings)


def get_model_client() -> ModelClient:
    return _default_model_client()


def get_dispatcher() -> Dispatcher:
    """Callable that runs background continuations; tests override it to run inline."""
    return submit_background
