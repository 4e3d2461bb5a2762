"""Easy-apply wizard controller.

Drives one posting's application modal from the first step to submission:

    AwaitingStep -> Filling -> (next/review clicked) -> AwaitingStep ...
                             -> Submitting -> Succeeded
    any step                 -> Failed

Every failure that belongs to the posting (validation marker, missing
control, step limit, classification/resolution/driver/LLM error) is turned
into an unprocessed ApplicationResult here. Nothing escapes to the batch.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from applybot.apply import selectors as sel
from applybot.apply.classifier import extract_fields
from applybot.apply.driver import Driver
from applybot.apply.fields import Answer, FieldKind
from applybot.apply.resolver import AnswerResolver
from applybot.errors import (
    ApplyBotError,
    DriverTimeout,
    StepLimitExceeded,
    StructuralError,
    ValidationFailed,
    WizardError,
)
from applybot.models import ApplicationResult, Posting
from applybot.schemas import AutomationSettings

logger = logging.getLogger(__name__)


class WizardState(str, Enum):
    AWAITING_STEP = "AwaitingStep"
    FILLING = "Filling"
    SUBMITTING = "Submitting"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"


@dataclass
class RunContext:
    """State owned by a single wizard run; a new one is made per posting."""

    posting: Posting
    state: WizardState = WizardState.AWAITING_STEP
    step: int = 0
    fill_cycles: int = 0
    resume_uploaded: bool = False
    identity_handled: bool = False
    step_answers: list[Answer] = field(default_factory=list)

    @property
    def job_description(self) -> str:
        return self.posting.description


class WizardController:
    def __init__(
        self,
        driver: Driver,
        resolver: AnswerResolver,
        resume_path: Path,
        settings: AutomationSettings | None = None,
    ) -> None:
        self.driver = driver
        self.resolver = resolver
        self.resume_path = Path(resume_path).expanduser().resolve()
        self.settings = settings or AutomationSettings()

    async def run(self, posting: Posting) -> ApplicationResult:
        """Fill and submit the open wizard for ``posting``.

        Never raises: whatever goes wrong is this posting's failure only.
        """
        context = RunContext(posting=posting)
        try:
            await self._drive(context)
        except WizardError as e:
            logger.warning("%s @ %s failed: %s", posting.title, posting.company, e)
            return self._failed(context, str(e), e.reason)
        except ApplyBotError as e:
            logger.warning(
                "%s @ %s failed while %s: %s", posting.title, posting.company, context.state.value, e
            )
            return self._failed(context, str(e), type(e).__name__)
        except Exception as e:
            logger.exception("Unexpected error on %s @ %s while %s", posting.title, posting.company, context.state.value)
            return self._failed(context, f"{type(e).__name__}: {e}", type(e).__name__)

        logger.info("Applied: %s @ %s (%d steps)", posting.title, posting.company, context.step + 1)
        return ApplicationResult.success(
            posting, steps=context.step + 1, fill_cycles=context.fill_cycles, state=context.state.value
        )

    @staticmethod
    def _failed(context: RunContext, error: str, reason: str) -> ApplicationResult:
        context.state = WizardState.FAILED
        return ApplicationResult.failure(
            context.posting,
            error,
            reason=reason,
            steps=context.step,
            fill_cycles=context.fill_cycles,
            state=context.state.value,
        )

    # -- state machine ------------------------------------------------------

    async def _drive(self, context: RunContext) -> None:
        while True:
            context.state = WizardState.AWAITING_STEP
            logger.debug("Step %d: inspecting form", context.step)
            await self._fill_step(context)

            next_btn = await self.driver.find_one(None, sel.NEXT_BUTTON)
            review_btn = await self.driver.find_one(None, sel.REVIEW_BUTTON)
            if next_btn is None and review_btn is None:
                logger.debug("No further steps after step %d", context.step)
                break

            if context.step + 1 >= self.settings.max_steps:
                raise StepLimitExceeded(self.settings.max_steps)

            await self.driver.click(next_btn if next_btn is not None else review_btn)
            await asyncio.sleep(self.settings.settle_delay)

            if await self.driver.find_one(None, sel.ERROR_FEEDBACK) is not None:
                raise ValidationFailed(context.step + 1)

            context.step += 1

        context.state = WizardState.SUBMITTING
        await self._submit()
        context.state = WizardState.SUCCEEDED

    async def _fill_step(self, context: RunContext) -> None:
        await self._upload_resume(context)

        fields = await extract_fields(self.driver)
        if not fields:
            logger.debug("No fields on step %d", context.step)
            return

        context.state = WizardState.FILLING
        context.fill_cycles += 1
        context.step_answers = []
        for f in fields:
            answer = await self.resolver.resolve(f, context)
            if answer is None:
                continue
            await self._apply(answer)
            context.step_answers.append(answer)
        context.identity_handled = True

    async def _upload_resume(self, context: RunContext) -> None:
        # the modal keeps an uploaded file across steps, so upload only once per run
        if context.resume_uploaded:
            return
        upload = await self.driver.find_one(None, sel.RESUME_UPLOAD_INPUT)
        if upload is None:
            return
        await self.driver.upload_file(upload, self.resume_path)
        context.resume_uploaded = True
        logger.info("Uploaded resume %s", self.resume_path.name)

    async def _apply(self, answer: Answer) -> None:
        f = answer.field
        if answer.autocomplete:
            await self._fill_autocomplete(answer)
        elif f.kind in (FieldKind.TEXT, FieldKind.NUMERIC):
            # triple click selects any prefilled value so typing replaces it
            await self.driver.click(f.locator, click_count=3)
            await self.driver.type(f.locator, answer.value)
        elif f.kind is FieldKind.SELECT:
            await self.driver.select_option(f.locator, answer.option.locator)
        else:
            await self.driver.click(answer.option.locator)

    async def _fill_autocomplete(self, answer: Answer) -> None:
        f = answer.field
        await self.driver.click(f.locator, click_count=3)
        await self.driver.type(f.locator, answer.value, delay=0.1)
        await asyncio.sleep(self.settings.settle_delay)
        try:
            await self.driver.wait_for(sel.TYPEAHEAD_SUGGESTIONS, self.settings.typeahead_timeout)
        except DriverTimeout as e:
            logger.warning("No suggestions for %r (%s); leaving typed value", f.label, e)
            return
        await self.driver.press("ArrowDown")
        await self.driver.press("Enter")

    async def _submit(self) -> None:
        follow = await self.driver.find_one(None, sel.FOLLOW_COMPANY_LABEL)
        if follow is not None:
            await self.driver.click(follow)
            logger.debug("Unchecked follow-company")

        submit = await self.driver.find_one(None, sel.SUBMIT_BUTTON)
        if submit is None:
            raise StructuralError("a submit control on the final step")
        if self.settings.dry_run:
            logger.info("Dry run: not submitting")
            return
        await self.driver.click(submit)
