"""Source extractors — fetch a manual by URL and turn it into chunks.

One extractor class exists per :class:`~manual_rag.models.SourceKind`.
Adding a new kind means adding a variant to the enum and registering a
class in :data:`EXTRACTORS`; nothing else string-matches on URLs.
"""

from __future__ import annotations

import io
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from urllib.parse import unquote, urlparse

import requests
from bs4 import BeautifulSoup
from fastapi.concurrency import run_in_threadpool
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from manual_rag.config import Settings
from manual_rag.errors import ExtractionError
from manual_rag.ingestion.chunker import chunk_text, normalize_text
from manual_rag.models import SourceKind

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

_BASE_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept-Language": "ja,en-US;q=0.9,en;q=0.8",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
}

UNTITLED = "Untitled"


@dataclass
class ExtractedContent:
    """Result of fetching and chunking one source."""

    kind: SourceKind
    title: str
    text: str
    chunks: list[str] = field(default_factory=list)


class Extractor(ABC):
    """Fetch a URL, extract its text, and chunk it."""

    kind: SourceKind
    accept: str = "*/*"

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    async def extract(self, url: str, title: str | None = None) -> ExtractedContent:
        """Download *url* and return its title, text, and chunks.

        Raises
        ------
        ExtractionError
            On network failure, a non-success response, or unreadable content.
        """
        body = await run_in_threadpool(self._fetch, url)
        text, derived_title = self._parse(url, body)
        chunks = chunk_text(
            text,
            chunk_size=self._settings.chunk_size,
            overlap=self._settings.chunk_overlap,
            min_length=self._settings.min_chunk_length,
        )
        logger.info(
            "Extracted %s: %d chars -> %d chunks", url, len(text), len(chunks)
        )
        return ExtractedContent(
            kind=self.kind,
            title=title or derived_title,
            text=text,
            chunks=chunks,
        )

    def _fetch(self, url: str) -> bytes:
        headers = {**_BASE_HEADERS, "Accept": self.accept}
        try:
            resp = requests.get(
                url,
                headers=headers,
                timeout=self._settings.fetch_timeout,
                allow_redirects=True,
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise ExtractionError(f"Failed to fetch {url}: {exc}") from exc
        return resp.content

    @abstractmethod
    def _parse(self, url: str, body: bytes) -> tuple[str, str]:
        """Return ``(raw_text, derived_title)`` for the fetched *body*."""
        ...


class PdfExtractor(Extractor):
    """PDF files, read page by page with ``pypdf``."""

    kind = SourceKind.PDF
    accept = "application/pdf,*/*"

    def _parse(self, url: str, body: bytes) -> tuple[str, str]:
        try:
            reader = PdfReader(io.BytesIO(body))
            pages = [page.extract_text() or "" for page in reader.pages]
        except (PyPdfError, ValueError) as exc:
            raise ExtractionError(f"Could not read PDF from {url}: {exc}") from exc
        return "\n\n".join(pages), pdf_title_from_url(url)


class WebExtractor(Extractor):
    """HTML pages, with navigation chrome stripped."""

    kind = SourceKind.WEB
    accept = "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8"

    def _parse(self, url: str, body: bytes) -> tuple[str, str]:
        soup = BeautifulSoup(body, "html.parser")
        # title first: the <header> strip below may remove the page's <h1>
        title = extract_html_title(soup)
        return extract_html_text(soup), title


# ── HTML helpers ──────────────────────────────────────────────────────

_NOISE_SELECTORS = (
    "script, style, nav, footer, header, aside, "
    ".navigation, .sidebar, .menu, .ad, .advertisement"
)

_CONTENT_SELECTORS = (
    "main",
    "article",
    ".content",
    ".main-content",
    "#content",
    "#main",
    ".post-content",
    ".entry-content",
)


def extract_html_title(soup: BeautifulSoup) -> str:
    """Best-effort page title, falling back to ``"Untitled"``."""
    for selector in ('meta[property="og:title"]', 'meta[name="title"]'):
        tag = soup.select_one(selector)
        if tag and tag.get("content", "").strip():
            return tag["content"].strip()
    if soup.title and soup.title.get_text(strip=True):
        return soup.title.get_text(strip=True)
    h1 = soup.find("h1")
    if h1 and h1.get_text(strip=True):
        return h1.get_text(strip=True)
    return UNTITLED


def extract_html_text(soup: BeautifulSoup) -> str:
    """Main-content text of the page with boiler-plate removed.

    Mutates *soup*.
    """
    for tag in soup.select(_NOISE_SELECTORS):
        tag.decompose()

    for selector in _CONTENT_SELECTORS:
        elements = soup.select(selector)
        if elements:
            text = normalize_text(" ".join(el.get_text(" ") for el in elements))
            if text:
                return text
            # first matching selector was empty: use the body instead
            break

    body = soup.body or soup
    return normalize_text(body.get_text(" "))


def pdf_title_from_url(url: str) -> str:
    """Derive ``"PDF: <file name>"`` from the last path segment of *url*."""
    name = unquote(urlparse(url).path.rsplit("/", 1)[-1])
    return f"PDF: {name or 'Unknown'}"


# ── dispatch ──────────────────────────────────────────────────────────

EXTRACTORS: dict[SourceKind, type[Extractor]] = {
    SourceKind.PDF: PdfExtractor,
    SourceKind.WEB: WebExtractor,
}


def get_extractor(kind: SourceKind, settings: Settings) -> Extractor:
    """Return the extractor registered for *kind*."""
    return EXTRACTORS[kind](settings)
