"""
Letterboxd Diary Scraper
------------------------
✓ Plain HTTP GET of the public diary page (optional relay prefix)
✓ Multi-page fetch, stops at the first empty page
✓ rated-N class first, star glyphs as fallback
✓ One error type for every way a fetch can fail
"""

import os
import re
import logging
from urllib.parse import quote

import requests
from bs4 import BeautifulSoup
from dotenv import load_dotenv

from letterboxd_stats import DATE_PATH_RE, films_to_frame

load_dotenv()

logger = logging.getLogger(__name__)

# ============================================================
# 1. CONFIG
# ============================================================

BASE_URL = os.getenv("LETTERBOXD_BASE_URL", "https://letterboxd.com").rstrip("/")
PROXY_URL = os.getenv("LETTERBOXD_PROXY_URL", "")
TIMEOUT = float(os.getenv("LETTERBOXD_TIMEOUT", "10"))
MAX_PAGES = int(os.getenv("LETTERBOXD_MAX_PAGES", "1"))
USER_AGENT = os.getenv(
    "LETTERBOXD_USER_AGENT",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0 Safari/537.36",
)

RATED_CLASS_RE = re.compile(r"rated-(\d+)")
YEAR_RE = re.compile(r"\d{4}")


class DiaryFetchError(RuntimeError):
    """The diary could not be fetched or held no entries."""


# ============================================================
# 2. FETCHING
# ============================================================

def diary_url(username, page=1, base_url=None, proxy_url=None):
    user = (username or "").strip().strip("/")
    if not user:
        raise ValueError("A Letterboxd username is required")

    url = f"{(base_url or BASE_URL).rstrip('/')}/{quote(user)}/films/diary/"
    if page > 1:
        url += f"page/{page}/"

    proxy = PROXY_URL if proxy_url is None else proxy_url
    return proxy + url if proxy else url


def fetch_diary_page(username, page=1, session=None, timeout=None, base_url=None, proxy_url=None):
    url = diary_url(username, page, base_url=base_url, proxy_url=proxy_url)
    session = session or requests
    try:
        response = session.get(
            url,
            headers={"User-Agent": USER_AGENT},
            timeout=TIMEOUT if timeout is None else timeout,
        )
    except requests.RequestException as exc:
        raise DiaryFetchError(f"Could not reach {url}: {exc}") from exc

    if response.status_code != 200:
        raise DiaryFetchError(f"{url} returned HTTP {response.status_code}")

    logger.info("Fetched %s (%d bytes)", url, len(response.text))
    return response.text


# ============================================================
# 3. PARSING
# ============================================================

def rating_from_stars(text):
    """'★★★★½' -> 4.5; None when there are no stars at all."""
    text = text or ""
    value = text.count("★") + (0.5 if "½" in text else 0)
    return value or None


def _row_title(row):
    node = row.select_one(".headline-3 a") or row.select_one(".headline-3")
    if node is not None:
        return node.get_text(strip=True)
    poster = row.select_one("[data-film-name]")
    return poster["data-film-name"].strip() if poster is not None else ""


def _row_date(row):
    for selector in (".td-day a", ".td-calendar .date a", "a[href*='/diary/for/']"):
        for link in row.select(selector):
            href = link.get("href", "")
            if DATE_PATH_RE.search(href):
                return href
    return row.get("data-viewing-date", "")


def _row_rating(row):
    span = row.select_one(".td-rating .rating")
    if span is None:
        return None
    for cls in span.get("class", []):
        match = RATED_CLASS_RE.fullmatch(cls)
        if match:
            value = int(match.group(1))
            return value / 2 if value > 0 else None
    return rating_from_stars(span.get_text())


def _row_year(row):
    node = row.select_one(".td-released")
    match = YEAR_RE.search(node.get_text()) if node is not None else None
    return int(match.group()) if match else 0


def parse_diary(html):
    """One record per diary-entry-row; fields the row lacks come back empty."""
    soup = BeautifulSoup(html, "html.parser")
    records = []
    for row in soup.select(".diary-entry-row"):
        records.append({
            "title": _row_title(row),
            "date": _row_date(row),
            "rating": _row_rating(row),
            "liked": row.select_one(".td-like .icon-liked") is not None,
            "year": _row_year(row),
        })
    return records


def fetch_diary(username, pages=None, session=None, timeout=None, base_url=None, proxy_url=None):
    """Fetch up to `pages` diary pages and return them as a film table."""
    pages = MAX_PAGES if pages is None else pages
    own_session = session is None
    session = session or requests.Session()

    records = []
    try:
        for page in range(1, max(1, pages) + 1):
            try:
                html = fetch_diary_page(
                    username, page, session=session, timeout=timeout,
                    base_url=base_url, proxy_url=proxy_url,
                )
            except DiaryFetchError:
                if page == 1:
                    raise
                logger.warning("Stopping at diary page %d for %s", page, username, exc_info=True)
                break

            rows = parse_diary(html)
            logger.info("Parsed %d diary rows from page %d for %s", len(rows), page, username)
            if not rows:
                break
            records.extend(rows)
    finally:
        if own_session:
            session.close()

    if not records:
        raise DiaryFetchError(f"No diary entries found for {username!r}")

    return films_to_frame(records)
