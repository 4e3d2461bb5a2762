"""Apply orchestration: filter a results page, run the wizard per posting, persist.

Postings are handled strictly one after another on a single driver session.
A posting that fails is recorded and the batch moves on.
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import AsyncIterable, Sequence

from applybot import config
from applybot.apply import selectors as sel
from applybot.apply.driver import Driver
from applybot.apply.wizard import WizardController
from applybot.discovery.filter import FilterResult, filter_postings
from applybot.discovery.linkedin import job_url
from applybot.errors import ApplyBotError
from applybot.models import ApplicationResult, BatchResult, ClassifiedPosting, Posting
from applybot.schemas import AutomationSettings, WorkPreferences

logger = logging.getLogger(__name__)


def write_results(batch: BatchResult, directory: Path | None = None) -> Path:
    """Write one batch record to ``applied_<epoch-ms>.json``. Never read back."""
    directory = directory or config.data_dir()
    directory.mkdir(parents=True, exist_ok=True)
    stamp = int(time.time() * 1000)
    while (directory / f"applied_{stamp}.json").exists():
        stamp += 1
    path = directory / f"applied_{stamp}.json"
    path.write_text(json.dumps(batch.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Results saved to %s", path)
    return path


class ApplicationOrchestrator:
    def __init__(
        self,
        driver: Driver,
        wizard: WizardController,
        preferences: WorkPreferences,
        settings: AutomationSettings | None = None,
        results_dir: Path | None = None,
    ) -> None:
        self.driver = driver
        self.wizard = wizard
        self.preferences = preferences
        self.settings = settings or preferences.automation
        self.results_dir = results_dir

    async def apply_to(self, posting: Posting) -> ApplicationResult:
        """Open the posting, start the easy-apply modal, and hand over to the wizard."""
        logger.info("Applying: %s @ %s (%s)", posting.title, posting.company, posting.id)
        try:
            await self.driver.navigate(job_url(posting))
            button = await self.driver.wait_for(sel.EASY_APPLY_BUTTON, self.settings.selector_timeout)
            await self.driver.click(button)
        except ApplyBotError as e:
            logger.warning("Could not open application for %s: %s", posting.id, e)
            return ApplicationResult.failure(posting, str(e), reason=type(e).__name__)
        except Exception as e:
            logger.exception("Unexpected error opening application for %s", posting.id)
            return ApplicationResult.failure(posting, f"{type(e).__name__}: {e}", reason=type(e).__name__)
        return await self.wizard.run(posting)

    async def dismiss_cards(self, postings: Sequence[ClassifiedPosting]) -> None:
        """Hide result cards on the still-loaded results page."""
        for classified in postings:
            card = classified.posting.card
            if card is None:
                continue
            try:
                button = await self.driver.find_one(card, sel.CARD_DISMISS)
                if button is not None:
                    await self.driver.click(button)
            except ApplyBotError as e:
                logger.debug("Could not dismiss card %s: %s", classified.posting.id, e)

    async def process_batch(self, postings: Sequence[Posting]) -> BatchResult:
        filtered: FilterResult = filter_postings(
            postings, self.preferences.title_blacklist, self.preferences.company_blacklist
        )
        batch = BatchResult(
            blacklisted=list(filtered.blacklisted),
            already_applied=list(filtered.already_applied),
        )

        if self.settings.close_handled_cards:
            await self.dismiss_cards(filtered.blacklisted)

        for classified in filtered.ready_to_process:
            batch.add(await self.apply_to(classified.posting))

        logger.info(
            "Batch done: %d processed, %d unprocessed, %d blacklisted, %d already applied",
            len(batch.processed),
            len(batch.unprocessed),
            len(batch.blacklisted),
            len(batch.already_applied),
        )
        write_results(batch, self.results_dir)
        return batch

    async def run(self, pages: AsyncIterable[list[Posting]]) -> list[BatchResult]:
        """Process every page yielded by a search, one batch per page."""
        batches: list[BatchResult] = []
        async for postings in pages:
            if not postings:
                continue
            batches.append(await self.process_batch(postings))
        return batches
