"""
Static business details for the landing page and the structured data built from them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from licsite.aggregator import AggregateSnapshot
from licsite.markup import escape_html


@dataclass(frozen=True)
class SiteInfo:
    url: str = "https://lic-neemuch-jitendra-patidar.vercel.app/"
    name: str = "LIC Neemuch"
    owner: str = "Jitendra Patidar"
    title: str = "LIC Neemuch: How Jitendra Patidar Ensures Your Secure Life"
    keywords: str = (
        "LIC Neemuch, Jitendra Patidar, secure life, life insurance Neemuch, "
        "LIC agent recruitment, financial planning Madhya Pradesh, "
        "trusted insurance solutions"
    )
    title_image: str = (
        "https://mys3resources.s3.ap-south-1.amazonaws.com/LIC/titleImage_LICBlo.jpeg"
    )
    profile_image: str = (
        "https://mys3resources.s3.ap-south-1.amazonaws.com/LIC/jitendraprofilephoto.jpg"
    )
    instagram_handle: str = "jay7268patidar"
    telephone: str = "+917987235207"
    telephone_display: str = "+91 7987235207"
    street_address: str = "Vikas Nagar, Scheme No. 14-3, Neemuch Chawni"
    locality: str = "Neemuch"
    region: str = "Madhya Pradesh"
    postal_code: str = "458441"
    country: str = "IN"
    latitude: float = 24.476385
    longitude: float = 74.862409
    opening_hours: str = "Mo-Fr 09:00-17:00"
    map_url: str = "https://maps.google.com/?q=Vikas+Nagar,+Neemuch,+Madhya+Pradesh+458441"
    languages: tuple[str, ...] = field(default=("en", "hi"))

    @property
    def instagram_url(self) -> str:
        return f"https://www.instagram.com/{self.instagram_handle}"

    @property
    def full_address(self) -> str:
        return f"{self.street_address}, {self.locality}, {self.region} {self.postal_code}"

    def meta_description(self, snapshot: AggregateSnapshot) -> str:
        return (
            f"{self.owner}, LIC Development Officer in {self.locality}, offers trusted "
            "life insurance, financial planning, and LIC agent opportunities in "
            f"{self.region}. Rated {snapshot.average_rating_text}/5 by "
            f"{snapshot.rating_count} clients."
        )


def _date_published(created_at: float) -> str:
    return datetime.fromtimestamp(created_at, tz=timezone.utc).date().isoformat()


def build_structured_data(site: SiteInfo, snapshot: AggregateSnapshot) -> list[dict]:
    """JSON-LD blocks (Organization + LocalBusiness) for search engines."""
    same_as = [site.instagram_url]
    organization = {
        "@context": "https://schema.org",
        "@type": "Organization",
        "name": site.name,
        "url": site.url,
        "logo": {
            "@type": "ImageObject",
            "url": site.title_image,
            "width": 600,
            "height": 200,
        },
        "sameAs": same_as,
    }
    business = {
        "@context": "https://schema.org",
        "@type": "LocalBusiness",
        "name": site.name,
        "description": site.meta_description(snapshot),
        "url": site.url,
        "address": {
            "@type": "PostalAddress",
            "streetAddress": site.street_address,
            "addressLocality": site.locality,
            "addressRegion": site.region,
            "postalCode": site.postal_code,
            "addressCountry": site.country,
        },
        "geo": {
            "@type": "GeoCoordinates",
            "latitude": site.latitude,
            "longitude": site.longitude,
        },
        "telephone": site.telephone,
        "image": site.title_image,
        "priceRange": "$$",
        "openingHours": site.opening_hours,
        "hasMap": site.map_url,
        "sameAs": same_as,
        "inLanguage": list(site.languages),
        "contactPoint": {
            "@type": "ContactPoint",
            "telephone": site.telephone,
            "contactType": "Customer Service",
            "areaServed": site.country,
            "availableLanguage": ["English", "Hindi"],
        },
        "aggregateRating": {
            "@type": "AggregateRating",
            "ratingValue": snapshot.average_rating_text,
            "reviewCount": snapshot.rating_count,
            "bestRating": "5",
            "worstRating": "1",
        },
        "review": [
            {
                "@type": "Review",
                "author": {"@type": "Person", "name": str(escape_html(review.username))},
                "datePublished": _date_published(review.created_at),
                "reviewBody": str(escape_html(review.comment)),
            }
            for review in snapshot.reviews
        ],
    }
    return [organization, business]
