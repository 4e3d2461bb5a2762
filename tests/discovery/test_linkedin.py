"""Tests for LinkedIn search URL building and result extraction.

@file test_linkedin.py
@description Offline against FakeDriver documents; no browser.
"""

from __future__ import annotations

import asyncio
from urllib.parse import parse_qs, urlparse

import pytest

from applybot.apply import selectors as sel
from applybot.discovery.linkedin import (
    build_search_url,
    extract_postings,
    job_id_from_href,
    job_url,
    normalize_description,
    search_pages,
    validate_session,
    wait_for_login,
)
from applybot.errors import DriverTimeout
from applybot.models import Posting, PriorState
from applybot.schemas import WorkPreferences
from fakes import FakeDriver, FakeElement


def _card(pid: str, title: str, company: str, state: str = "") -> FakeElement:
    card = FakeElement(f"card:{pid}")
    card.add(sel.CARD_LINK, FakeElement(attrs={"href": f"/jobs/view/{pid}/?refId=abc"}))
    card.add(sel.CARD_TITLE, FakeElement(text=title))
    card.add(sel.CARD_COMPANY, FakeElement(text=company))
    if state:
        card.add(sel.CARD_STATE, FakeElement(text=state))
    return card


def _results_page(*cards: FakeElement, description: str = "We build things.") -> FakeElement:
    page = FakeElement("results")
    page.add(sel.RESULT_CARD, *cards)
    page.add(sel.JOB_DESCRIPTION, FakeElement(text=description))
    return page


class TestBuildSearchUrl:
    def test_query_parameters(self, preferences_data) -> None:
        prefs = WorkPreferences.model_validate(preferences_data)
        url = build_search_url(prefs, "Berlin", "Software Engineer")

        parsed = urlparse(url)
        assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == sel.JOB_SEARCH_URL
        query = parse_qs(parsed.query)
        assert query["distance"] == ["25"]
        assert query["f_E"] == ["2,3,4"]
        assert query["f_WT"] == ["2,3"]
        assert query["f_TPR"] == ["r86400"]
        assert query["f_AL"] == ["true"]
        assert query["f_VJ"] == ["true"]
        assert query["location"] == ["Berlin"]
        assert query["keywords"] == ["Software Engineer"]
        assert query["sortBy"] == ["DD"]
        assert "start" not in query

    def test_later_pages_set_start(self, preferences_data) -> None:
        prefs = WorkPreferences.model_validate(preferences_data)
        query = parse_qs(urlparse(build_search_url(prefs, "Berlin", "Dev", page=2)).query)
        assert query["start"] == ["50"]


class TestHelpers:
    @pytest.mark.parametrize(
        "href, expected",
        [
            ("/jobs/view/4104747669/?refId=x", "4104747669"),
            ("https://www.linkedin.com/jobs/view/42/", "42"),
            ("/jobs/", ""),
            (None, ""),
        ],
    )
    def test_job_id_from_href(self, href, expected) -> None:
        assert job_id_from_href(href) == expected

    def test_job_url(self) -> None:
        assert job_url(Posting(id="42", title="t", company="c")) == f"{sel.JOB_VIEW_URL}42"

    def test_normalize_description(self) -> None:
        assert normalize_description("  Line one \n\n   Line two  ") == "Line one\nLine two"

    @pytest.mark.parametrize(
        "text, expected",
        [("Applied", PriorState.APPLIED), ("Viewed", PriorState.VIEWED), ("Promoted", PriorState.NEW), (None, PriorState.NEW)],
    )
    def test_prior_state_parse(self, text, expected) -> None:
        assert PriorState.parse(text) is expected


class TestExtractPostings:
    def test_reads_cards_in_order(self) -> None:
        driver = FakeDriver(
            _results_page(
                _card("1", "Backend Engineer", "Acme"),
                _card("2", "Staff Engineer", "Globex", state="Applied"),
            )
        )
        postings = asyncio.run(extract_postings(driver, settle_delay=0))

        assert [p.id for p in postings] == ["1", "2"]
        assert postings[0].title == "Backend Engineer"
        assert postings[0].company == "Acme"
        assert postings[0].prior_state is PriorState.NEW
        assert postings[0].description == "We build things."
        assert postings[1].prior_state is PriorState.APPLIED
        assert postings[0].card is not None
        assert driver.clicked() == ["card:1", "card:2"]

    def test_card_without_link_is_skipped(self) -> None:
        broken = FakeElement("card:broken")
        broken.add(sel.CARD_TITLE, FakeElement(text="Ghost"))
        driver = FakeDriver(_results_page(broken, _card("7", "Dev", "Acme")))

        postings = asyncio.run(extract_postings(driver, settle_delay=0))
        assert [p.id for p in postings] == ["7"]


class TestSearchPages:
    def test_stops_at_no_results_banner(self, preferences_data, fast_settings) -> None:
        prefs = WorkPreferences.model_validate(preferences_data)
        settings = fast_settings.model_copy(update={"max_pages": 5})
        driver = FakeDriver()
        driver.pages[build_search_url(prefs, "Berlin", "Software Engineer", 0)] = _results_page(
            _card("1", "Backend Engineer", "Acme")
        )
        empty = FakeElement("empty")
        empty.add(sel.NO_RESULTS_BANNER, FakeElement())
        driver.pages[build_search_url(prefs, "Berlin", "Software Engineer", 1)] = empty

        async def collect():
            return [page async for page in search_pages(driver, prefs, settings)]

        pages = asyncio.run(collect())
        assert [[p.id for p in page] for page in pages] == [["1"]]
        assert len([a for a in driver.actions if a[0] == "navigate"]) == 2

    def test_respects_max_pages(self, preferences_data, fast_settings) -> None:
        prefs = WorkPreferences.model_validate(preferences_data)
        driver = FakeDriver(_results_page(_card("1", "Dev", "Acme")))

        async def collect():
            return [page async for page in search_pages(driver, prefs, fast_settings)]

        assert len(asyncio.run(collect())) == 1


class TestSession:
    def test_valid_session_redirects_to_feed(self) -> None:
        driver = FakeDriver()
        driver.redirects[sel.LOGIN_URL] = f"{sel.FEED_URL}/"
        assert asyncio.run(validate_session(driver)) is True

    def test_missing_session(self) -> None:
        assert asyncio.run(validate_session(FakeDriver())) is False

    def test_wait_for_login_times_out(self) -> None:
        driver = FakeDriver()
        driver.url = sel.LOGIN_URL
        with pytest.raises(DriverTimeout):
            asyncio.run(wait_for_login(driver, timeout=0.05, poll=0.01))

    def test_wait_for_login_returns_once_on_feed(self) -> None:
        driver = FakeDriver()
        driver.url = f"{sel.FEED_URL}/"
        asyncio.run(wait_for_login(driver, timeout=0.05, poll=0.01))
