"""
Injected external clients.

The LLM provider chain and the Notion mirror are built once when the app
starts and kept on app.state. Routes get them through the dependencies below,
and tests replace them with app.dependency_overrides.
"""
import logging

from fastapi import FastAPI, Request

from core.config import settings
from services.llm_providers import GenerationClient, build_generation_client
from services.notion_mirror import NotionMirror

logger = logging.getLogger(__name__)


def init_clients(app: FastAPI) -> None:
    app.state.generation_client = build_generation_client(settings)
    app.state.notion_mirror = NotionMirror.from_settings(settings)


def get_generation_client(request: Request) -> GenerationClient:
    return request.app.state.generation_client


def get_notion_mirror(request: Request) -> NotionMirror:
    return request.app.state.notion_mirror
