"""LinkedIn job search: URL building, session check, and posting extraction."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import AsyncIterator
from urllib.parse import urlencode, urlparse

from applybot.apply import selectors as sel
from applybot.apply.driver import Driver
from applybot.errors import DriverTimeout
from applybot.models import Posting, PriorState
from applybot.schemas import AutomationSettings, WorkPreferences

log = logging.getLogger(__name__)

EXPERIENCE_CODES = {
    "internship": "1",
    "entry_level": "2",
    "associate": "3",
    "mid_senior_level": "4",
    "director": "5",
    "executive": "6",
}

WORK_TYPE_CODES = {
    "on_site": "1",
    "remote": "2",
    "hybrid": "3",
}

DATE_CODES = {
    "hours_24": "r86400",
    "week": "r604800",
    "month": "r2592000",
    "all_time": "",
}


def _filter_string(flags: dict[str, bool], mapping: dict[str, str]) -> str:
    return ",".join(mapping[key] for key, enabled in flags.items() if enabled and key in mapping)


def build_search_url(
    preferences: WorkPreferences,
    location: str,
    keyword: str,
    page: int = 0,
) -> str:
    """Build the jobs-search URL for one location/keyword/page.

    Always restricted to Easy Apply and verified postings, newest first.
    """
    params = {
        "distance": str(preferences.distance),
        "f_E": _filter_string(preferences.experience_level.model_dump(), EXPERIENCE_CODES),
        "f_WT": _filter_string(preferences.work_type.model_dump(), WORK_TYPE_CODES),
        "f_TPR": _filter_string(preferences.date.model_dump(), DATE_CODES),
        "f_AL": "true",
        "f_VJ": "true",
        "location": location,
        "keywords": keyword,
        "sortBy": "DD",
    }
    if page:
        params["start"] = str(page * sel.RESULTS_PER_PAGE)
    return f"{sel.JOB_SEARCH_URL}?{urlencode(params)}"


def job_url(posting: Posting) -> str:
    return f"{sel.JOB_VIEW_URL}{posting.id}"


def job_id_from_href(href: str | None) -> str:
    """'/jobs/view/4104747669/?refId=..' -> '4104747669'."""
    if not href:
        return ""
    parts = urlparse(href).path.split("/")
    return parts[3] if len(parts) > 3 else ""


def normalize_description(text: str) -> str:
    return re.sub(r"\s*\n\s*", "\n", text).strip()


async def validate_session(driver: Driver) -> bool:
    """Open the login page; a live session redirects to the feed."""
    await driver.navigate(sel.LOGIN_URL)
    url = await driver.current_url()
    valid = sel.FEED_URL in url
    if valid:
        log.info("Session valid")
    else:
        log.warning("Session not found (%s); log in manually in the opened browser", url)
    return valid


async def wait_for_login(driver: Driver, timeout: float = 300.0, poll: float = 2.0) -> None:
    """Block until the operator has logged in by hand and the feed is showing."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while sel.FEED_URL not in await driver.current_url():
        if loop.time() >= deadline:
            raise DriverTimeout(sel.FEED_URL, timeout)
        await asyncio.sleep(poll)
    log.info("Login detected")


async def _read(driver: Driver, scope, selector: str) -> str:
    el = await driver.find_one(scope, selector)
    return await driver.read_text(el) if el is not None else ""


async def extract_postings(driver: Driver, settle_delay: float = 1.0) -> list[Posting]:
    """Read every result card on the current search page, in order.

    Each card is clicked so the detail pane shows its description.
    """
    postings: list[Posting] = []
    cards = await driver.find_all(None, sel.RESULT_CARD)
    for card in cards:
        await driver.scroll_into_view(card)
        await driver.click(card)
        await asyncio.sleep(settle_delay)

        link = await driver.find_one(card, sel.CARD_LINK)
        href = await driver.read_attribute(link, "href") if link is not None else None
        posting_id = job_id_from_href(href)
        if not posting_id:
            log.debug("Skipping result card without a job link")
            continue

        postings.append(
            Posting(
                id=posting_id,
                title=await _read(driver, card, sel.CARD_TITLE),
                company=await _read(driver, card, sel.CARD_COMPANY),
                description=normalize_description(await _read(driver, None, sel.JOB_DESCRIPTION)),
                prior_state=PriorState.parse(await _read(driver, card, sel.CARD_STATE)),
                card=card,
            )
        )
    log.info("Extracted %d postings from results page", len(postings))
    return postings


async def search_pages(
    driver: Driver,
    preferences: WorkPreferences,
    settings: AutomationSettings | None = None,
) -> AsyncIterator[list[Posting]]:
    """Yield the postings of each results page for the first position/location.

    The caller handles a page before the next one is loaded, so card handles
    in a yielded batch are live until the caller navigates away.
    """
    settings = settings or preferences.automation
    location = preferences.locations[0]
    keyword = preferences.positions[0]

    for page in range(settings.max_pages):
        log.info("Searching '%s' in '%s', page %d", keyword, location, page + 1)
        await driver.navigate(build_search_url(preferences, location, keyword, page))
        if await driver.find_one(None, sel.NO_RESULTS_BANNER) is not None:
            log.info("No more results")
            return
        yield await extract_postings(driver, settings.settle_delay)
