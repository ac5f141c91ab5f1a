"""Fetch a web page and extract article text, title and publish date."""

from __future__ import annotations

from datetime import datetime, timezone

import httpx
from bs4 import BeautifulSoup

from cgt_engine.config.constants import EXCERPT_LIMIT, FULL_TEXT_LIMIT
from cgt_engine.config.policy import normalize_domain
from cgt_engine.config.settings import Settings
from cgt_engine.models.domain import ExtractedContent
from cgt_engine.observability.logger import get_logger

logger = get_logger("extractor")

DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "ko-KR,ko;q=0.9,en;q=0.8",
}

PUBLISHED_META_KEYS = (
    "article:published_time",
    "og:published_time",
    "publish_date",
    "pubdate",
    "date",
)


def parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    value = value.strip()
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        for fmt in ("%Y.%m.%d", "%Y/%m/%d", "%Y%m%d"):
            try:
                parsed = datetime.strptime(value[:10], fmt)
                break
            except ValueError:
                continue
        else:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _meta_content(soup: BeautifulSoup, key: str) -> str | None:
    tag = soup.find("meta", attrs={"property": key}) or soup.find("meta", attrs={"name": key})
    if tag and tag.get("content"):
        return tag["content"].strip()
    return None


def parse_html(url: str, html: str, max_chars: int = FULL_TEXT_LIMIT) -> ExtractedContent:
    soup = BeautifulSoup(html, "html.parser")

    title = _meta_content(soup, "og:title")
    if not title and soup.title:
        title = soup.title.get_text(strip=True)
    if not title:
        h1 = soup.find("h1")
        title = h1.get_text(strip=True) if h1 else ""

    published_at = None
    for key in PUBLISHED_META_KEYS:
        published_at = parse_datetime(_meta_content(soup, key))
        if published_at:
            break
    if published_at is None:
        time_tag = soup.find("time", attrs={"datetime": True})
        if time_tag:
            published_at = parse_datetime(time_tag["datetime"])

    metadata = {
        k: v
        for k, v in {
            "author": _meta_content(soup, "author"),
            "site_name": _meta_content(soup, "og:site_name"),
            "type": _meta_content(soup, "og:type"),
            "keywords": [
                kw.strip() for kw in (_meta_content(soup, "keywords") or "").split(",") if kw.strip()
            ],
        }.items()
        if v
    }
    description = _meta_content(soup, "description") or _meta_content(soup, "og:description")

    for tag in soup.find_all(["script", "style", "nav", "footer", "header", "noscript"]):
        tag.decompose()
    body = soup.body or soup
    text = " ".join(body.get_text(separator=" ").split())[:max_chars]

    return ExtractedContent(
        title=title or "제목 없음",
        text_content=text,
        excerpt=description or text[:EXCERPT_LIMIT],
        domain=normalize_domain(url),
        url=url,
        published_at=published_at,
        metadata=metadata,
    )


class HttpContentExtractor:
    """ContentExtractor over httpx. Returns None instead of raising on fetch or parse failure."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        self._client = client or httpx.AsyncClient(
            headers=DEFAULT_HEADERS, follow_redirects=True, max_redirects=5
        )

    async def extract(
        self, url: str, timeout_s: float | None = None, max_chars: int | None = None
    ) -> ExtractedContent | None:
        timeout = timeout_s or self._settings.extraction_timeout_s
        try:
            response = await self._client.get(url, timeout=timeout)
            response.raise_for_status()
            content_type = response.headers.get("content-type", "")
            if "html" not in content_type:
                logger.info("extraction_skipped", url=url, content_type=content_type)
                return None
            return parse_html(url, response.text, max_chars or FULL_TEXT_LIMIT)
        except httpx.HTTPError as e:
            logger.warning("extraction_failed", url=url, error=repr(e))
            return None
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning("extraction_parse_failed", url=url, error=repr(e))
            return None

    async def aclose(self) -> None:
        await self._client.aclose()
