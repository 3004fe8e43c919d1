from __future__ import annotations

import logging
import re
from urllib.parse import parse_qs, urlparse

from app.domain.models import LinkPreview

logger = logging.getLogger(__name__)

YOUTUBE_THUMBNAIL = "https://img.youtube.com/vi/{video_id}/hqdefault.jpg"
FACEBOOK_IMAGE = "https://images.unsplash.com/photo-1611162616475-46b635cb6868?auto=format&fit=crop&w=800&q=80"
X_IMAGE = "https://images.unsplash.com/photo-1611605698383-3b8cf24c4ece?auto=format&fit=crop&w=800&q=80"
DOH_IMAGE = "https://images.unsplash.com/photo-1576091160399-112ba8d25d1d?auto=format&fit=crop&w=800&q=80"
GENERIC_IMAGE = "https://images.unsplash.com/photo-1432888498266-38ffec3eaf0a?auto=format&fit=crop&w=800&q=80"

_IMAGE_SUFFIX = re.compile(r"\.(jpeg|jpg|gif|png)$")


def _youtube_video_id(host: str, path: str, query: str) -> str:
    if "youtu.be" in host:
        return path.lstrip("/")
    return parse_qs(query).get("v", [""])[0]


class LinkPreviewService:
    """Builds announcement link cards from the URL alone.

    No network fetch happens here; well-known hosts get a fixed card and
    everything else a generic one.
    """

    def build(self, url: str) -> LinkPreview | None:
        clean_url = url.strip()
        parsed = urlparse(clean_url)
        if parsed.scheme not in {"http", "https"} or not parsed.hostname:
            logger.info("link preview skipped for unparseable url %r", clean_url)
            return None
        domain = parsed.hostname.removeprefix("www.")

        if "youtube.com" in domain or "youtu.be" in domain:
            video_id = _youtube_video_id(domain, parsed.path, parsed.query)
            if video_id:
                return LinkPreview(
                    url=clean_url,
                    title="YouTube Video",
                    description="Watch this video on YouTube.",
                    image_url=YOUTUBE_THUMBNAIL.format(video_id=video_id),
                    domain="youtube.com",
                )

        if _IMAGE_SUFFIX.search(clean_url):
            return LinkPreview(
                url=clean_url,
                title="Shared Image",
                description="Click to view full size image.",
                image_url=clean_url,
                domain=domain,
            )

        if "facebook.com" in domain or "fb.watch" in domain:
            return LinkPreview(
                url=clean_url,
                title="Facebook Post",
                description="View this post on Facebook.",
                image_url=FACEBOOK_IMAGE,
                domain="facebook.com",
            )

        if "twitter.com" in domain or "x.com" in domain:
            return LinkPreview(
                url=clean_url,
                title="X (Twitter) Post",
                description="View this conversation on X.",
                image_url=X_IMAGE,
                domain="x.com",
            )

        if "doh.gov" in clean_url:
            return LinkPreview(
                url=clean_url,
                title="Department of Health Advisory",
                description="Official public health guidelines and updates.",
                image_url=DOH_IMAGE,
                domain="doh.gov.ph",
            )

        return LinkPreview(
            url=clean_url,
            title=f"Link: {domain}",
            description="Click to visit the external link.",
            image_url=GENERIC_IMAGE,
            domain=domain,
        )
