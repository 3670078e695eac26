"""
Server-rendered home page: cache lookup, aggregation, assembly and response headers.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from licsite.aggregator import aggregate_ratings_and_reviews
from licsite.cache import ResponseCache
from licsite.db import DbClient
from licsite.dependencies import get_home_page_handler
from licsite.page import render_error_page, render_home_page
from licsite.site import SiteInfo

logger = logging.getLogger(__name__)

router = APIRouter()

HOME_CACHE_KEY = "home"


def compute_etag(html: str) -> str:
    return '"%s"' % hashlib.md5(html.encode("utf-8")).hexdigest()


@dataclass
class RenderedPage:
    html: str
    etag: str
    cached: bool


class HomePageHandler:
    """Renders the home page, serving from ``cache`` while an entry is fresh."""

    def __init__(
        self,
        db: DbClient,
        cache: ResponseCache,
        site: SiteInfo,
        ttl_seconds: int = 600,
    ):
        self.db = db
        self.cache = cache
        self.site = site
        self.ttl_seconds = ttl_seconds

    @property
    def cache_control(self) -> str:
        ttl = self.ttl_seconds
        return f"public, max-age={ttl}, s-maxage={ttl}, stale-while-revalidate={ttl}"

    def render(self) -> RenderedPage:
        cached_html = self.cache.get(HOME_CACHE_KEY)
        if cached_html is not None:
            return RenderedPage(html=cached_html, etag=compute_etag(cached_html), cached=True)

        snapshot = aggregate_ratings_and_reviews(self.db)
        html = render_home_page(snapshot, self.site)
        # A degraded page is served but not kept, so the next request retries the store.
        if not snapshot.degraded:
            self.cache.set(HOME_CACHE_KEY, html, self.ttl_seconds)
        return RenderedPage(html=html, etag=compute_etag(html), cached=False)

    def invalidate(self) -> None:
        self.cache.clear()


@router.get("/", response_class=HTMLResponse)
def home_page(handler: HomePageHandler = Depends(get_home_page_handler)):
    try:
        page = handler.render()
    except Exception:
        logger.exception("SSR render failed")
        return HTMLResponse(render_error_page(), status_code=500)

    logger.debug("Home page served (cached=%s)", page.cached)
    return HTMLResponse(
        page.html,
        headers={"Cache-Control": handler.cache_control, "ETag": page.etag},
    )
