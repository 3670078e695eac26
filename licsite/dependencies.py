"""
Dependency wiring for the FastAPI app.

Clients are built once per application in ``create_app`` and kept on
``app.state``; request handlers receive them through the getters below.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Type, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError

from licsite.cache import InMemoryResponseCache, RedisResponseCache, ResponseCache
from licsite.config import Settings
from licsite.db import DbClient, InMemoryDbClient, SqlDbClient
from licsite.errors import BadRequestError

if TYPE_CHECKING:
    from licsite.home import HomePageHandler

ModelT = TypeVar("ModelT", bound=BaseModel)

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def build_db_client(settings: Settings) -> DbClient:
    if settings.use_in_memory_backends or not settings.database_url:
        return InMemoryDbClient()
    return SqlDbClient(settings.database_url)


def build_response_cache(settings: Settings) -> ResponseCache:
    if settings.use_in_memory_backends or not settings.redis_url:
        return InMemoryResponseCache(ttl_seconds=settings.ssr_cache_ttl_seconds)
    return RedisResponseCache(
        url=settings.redis_url,
        prefix=settings.redis_cache_prefix,
        ttl_seconds=settings.ssr_cache_ttl_seconds,
    )


def get_db_client(request: Request) -> DbClient:
    return request.app.state.db_client


def get_response_cache(request: Request) -> ResponseCache:
    return request.app.state.response_cache


def get_home_page_handler(request: Request) -> "HomePageHandler":
    return request.app.state.home_page


def request_body(model: Type[ModelT]) -> Callable[[Request], Any]:
    """
    Build a dependency that parses a JSON or HTML-form body into ``model``.

    Blank form fields count as missing. Unparseable bodies and values of the
    wrong type raise a 400 ``Invalid request body``.
    """

    async def parse(request: Request) -> ModelT:
        content_type = request.headers.get("content-type", "")
        try:
            if content_type.startswith(FORM_CONTENT_TYPES):
                form = await request.form()
                data = {key: value for key, value in form.items() if value != ""}
            else:
                data = await request.json()
            return model.model_validate(data)
        except (ValueError, ValidationError) as exc:
            raise BadRequestError("Invalid request body") from exc

    return parse
