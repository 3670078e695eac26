"""
Page assembly: turns an aggregate snapshot into the full home page document.
"""

from __future__ import annotations

from markupsafe import Markup

from licsite.aggregator import AggregateSnapshot
from licsite.markup import environment
from licsite.site import SiteInfo, build_structured_data


def render_content(snapshot: AggregateSnapshot, site: SiteInfo) -> str:
    """Inner fragment mounted under ``#root`` (nav, hero, contact, reviews, footer)."""
    return environment.get_template("content.html").render(snapshot=snapshot, site=site)


def render_home_page(snapshot: AggregateSnapshot, site: SiteInfo) -> str:
    content = render_content(snapshot, site)
    return environment.get_template("home.html").render(
        site=site,
        description=site.meta_description(snapshot),
        structured_data=build_structured_data(site, snapshot),
        content=Markup(content),
        # Escaped again when written into the data-html attribute.
        content_source=content,
        initial_data=snapshot.as_initial_data(),
    )


def render_error_page() -> str:
    return environment.get_template("error.html").render()
