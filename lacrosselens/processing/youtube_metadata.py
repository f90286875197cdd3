"""Fetch video metadata from YouTube, with or without a Data API key."""
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Lacrosse Video Analysis"
DEFAULT_DESCRIPTION = "Video analysis uploaded for coaching insights"
UNKNOWN_CHANNEL = "Unknown Channel"


@dataclass
class YouTubeMetadata:
    """Metadata fetched from YouTube for a video."""

    video_id: str
    title: str = DEFAULT_TITLE
    description: str = DEFAULT_DESCRIPTION
    channel_title: str = UNKNOWN_CHANNEL
    duration: str = "Unknown"  # ISO-8601, e.g. PT4M13S
    published_at: Optional[datetime] = None
    view_count: int = 0
    thumbnail_url: Optional[str] = None


DATA_API_URL = "https://www.googleapis.com/youtube/v3/videos"
OEMBED_URL = "https://www.youtube.com/oembed"
DURATION_RE = re.compile(r"^PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?$")


def default_thumbnail(video_id: str) -> str:
    return f"https://img.youtube.com/vi/{video_id}/maxresdefault.jpg"


def _duration_parts(duration: str) -> Optional[tuple[int, int, int]]:
    match = DURATION_RE.match(duration or "")
    if not match or not any(match.groups()):
        return None
    hours, minutes, seconds = (int(part or 0) for part in match.groups())
    return hours, minutes, seconds


def parse_duration(duration: str) -> str:
    """Convert ``PT1H2M3S`` to ``1:02:03`` and ``PT4M5S`` to ``4:05``."""
    parts = _duration_parts(duration)
    if parts is None:
        return "Unknown"
    hours, minutes, seconds = parts
    if hours:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


def duration_seconds(duration: str) -> Optional[int]:
    parts = _duration_parts(duration)
    if parts is None:
        return None
    hours, minutes, seconds = parts
    return hours * 3600 + minutes * 60 + seconds


def format_view_count(count: int) -> str:
    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M views"
    if count >= 1_000:
        return f"{count / 1_000:.1f}K views"
    return f"{count} views"


def enhanced_title(meta: YouTubeMetadata) -> str:
    """Title with runtime and views, e.g. ``Finals (4:13 • 1.2K views)``."""
    duration = parse_duration(meta.duration)
    if duration != "Unknown" and meta.view_count > 0:
        return f"{meta.title} ({duration} • {format_view_count(meta.view_count)})"
    if duration != "Unknown":
        return f"{meta.title} ({duration})"
    return meta.title


def enhanced_description(meta: YouTubeMetadata) -> str:
    channel = f" by {meta.channel_title}" if meta.channel_title != UNKNOWN_CHANNEL else ""
    published = meta.published_at.strftime("%Y-%m-%d") if meta.published_at else "an unknown date"
    header = f"YouTube video{channel}, published on {published}."

    body = meta.description or ""
    if len(body) > 10:
        if len(body) > 500:
            body = body[:500] + "..."
    else:
        body = "Video uploaded for lacrosse analysis and coaching insights."
    return f"{header}\n\n{body}"


def _parse_published(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


class YouTubeMetadataFetcher:
    """Fetch YouTube video metadata via the Data API, falling back to oEmbed."""

    def __init__(self, api_key: Optional[str] = None, timeout: float = 10.0):
        self._api_key = api_key
        self._timeout = timeout

    def fetch(self, video_id: str) -> YouTubeMetadata:
        """Fetch metadata for a YouTube video. Never raises -- returns defaults on failure."""
        if self._api_key:
            meta = self._fetch_data_api(video_id)
            if meta is not None:
                return meta
        return self._fetch_oembed(video_id)

    def _fetch_data_api(self, video_id: str) -> Optional[YouTubeMetadata]:
        try:
            resp = httpx.get(
                DATA_API_URL,
                params={
                    "id": video_id,
                    "key": self._api_key,
                    "part": "snippet,contentDetails,statistics",
                },
                timeout=self._timeout,
            )
            resp.raise_for_status()
            items = resp.json().get("items") or []
        except Exception as e:
            logger.warning("YouTube Data API request failed for %s: %s", video_id, e)
            return None

        if not items:
            logger.warning("YouTube Data API returned no items for %s", video_id)
            return None

        snippet = items[0].get("snippet", {})
        details = items[0].get("contentDetails", {})
        statistics = items[0].get("statistics", {})
        thumbnails = snippet.get("thumbnails", {})
        thumbnail = next(
            (thumbnails[size]["url"] for size in ("maxres", "high", "medium", "default") if size in thumbnails),
            default_thumbnail(video_id),
        )

        return YouTubeMetadata(
            video_id=video_id,
            title=snippet.get("title") or DEFAULT_TITLE,
            description=snippet.get("description") or DEFAULT_DESCRIPTION,
            channel_title=snippet.get("channelTitle") or UNKNOWN_CHANNEL,
            duration=details.get("duration") or "Unknown",
            published_at=_parse_published(snippet.get("publishedAt")),
            view_count=int(statistics.get("viewCount") or 0),
            thumbnail_url=thumbnail,
        )

    def _fetch_oembed(self, video_id: str) -> YouTubeMetadata:
        meta = YouTubeMetadata(video_id=video_id, thumbnail_url=default_thumbnail(video_id))
        try:
            resp = httpx.get(
                OEMBED_URL,
                params={"url": f"https://www.youtube.com/watch?v={video_id}", "format": "json"},
                timeout=self._timeout,
            )
            resp.raise_for_status()
            data = resp.json()
            meta.title = data.get("title") or DEFAULT_TITLE
            meta.channel_title = data.get("author_name") or UNKNOWN_CHANNEL
            meta.thumbnail_url = data.get("thumbnail_url") or meta.thumbnail_url
        except Exception as e:
            logger.warning("oEmbed lookup failed for %s: %s", video_id, e)
        return meta
