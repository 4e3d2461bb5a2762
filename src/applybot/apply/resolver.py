"""Produce an answer for every classified field.

Policy per field:
  - identity fields (name, email, phone, country code, city) come straight
    from the candidate profile, once per wizard run;
  - city is an autocomplete: typed, then the first suggestion is picked;
  - everything else goes to the language model with a prompt chosen by the
    field kind, and the raw response is parsed back into an answer.

Parsing never fails on a usable field: an unmatched option falls back to the
first option and a numeric answer without digits falls back to the default.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Protocol, Sequence

from applybot.apply import prompts
from applybot.apply.fields import Answer, Field, FieldKind, Option
from applybot.errors import ResolutionError
from applybot.llm import clean_output
from applybot.schemas import CandidateProfile

if TYPE_CHECKING:
    from applybot.apply.wizard import RunContext

log = logging.getLogger(__name__)

# Field.key -> attribute of TextResume.personal_information
IDENTITY_FIELDS: dict[str, str] = {
    "Email address": "email",
    "Phone country code": "phone_prefix",
    "Mobile phone number": "phone",
    "First name": "firstname",
    "Last name": "lastname",
    "City": "city",
}
AUTOCOMPLETE_FIELDS: frozenset[str] = frozenset({"City"})

_DIGITS = re.compile(r"\d+")


class LanguageModel(Protocol):
    async def ask(self, prompt: str) -> str: ...


# ---------------------------------------------------------------------------
# Option matching
# ---------------------------------------------------------------------------


class OptionStrategy(ABC):
    """Maps a free-text model response onto one of a field's options."""

    @abstractmethod
    def choose(self, response: str, options: Sequence[Option]) -> Option: ...


class SubstringFirstMatchOrDefault(OptionStrategy):
    """First option whose label occurs anywhere in the response, else the first option.

    Availability over correctness: a wrong-but-valid choice keeps the wizard
    moving where a stricter strategy would abort the posting.
    """

    def choose(self, response: str, options: Sequence[Option]) -> Option:
        if not options:
            raise ResolutionError("Cannot choose from an empty option list")
        for option in options:
            if option.label and option.label in response:
                return option
        log.warning(
            "No option matched response %r; falling back to first option %r",
            response[:80],
            options[0].label,
        )
        return options[0]


def extract_number(response: str) -> int | None:
    """First run of digits in the response, or None."""
    match = _DIGITS.search(response)
    return int(match.group()) if match else None


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class AnswerResolver:
    def __init__(
        self,
        llm: LanguageModel,
        profile: CandidateProfile,
        option_strategy: OptionStrategy | None = None,
        default_experience: int | None = None,
    ) -> None:
        self.llm = llm
        self.profile = profile
        self.option_strategy = option_strategy or SubstringFirstMatchOrDefault()
        self.default_experience = (
            profile.settings.default_experience if default_experience is None else default_experience
        )
        self._resume_json = profile.resume_json()
        self._preferences_json = profile.preferences_json()

    @staticmethod
    def is_identity(field: Field) -> bool:
        return field.key in IDENTITY_FIELDS

    async def resolve(self, field: Field, context: RunContext) -> Answer | None:
        """Answer one field. None means the field is deliberately left alone."""
        if self.is_identity(field):
            if context.identity_handled:
                return None
            return self.resolve_identity(field)

        for prior in context.step_answers:
            if _same_question(prior.field, field):
                return self._reuse(prior, field)

        if field.kind.has_options:
            return await self._resolve_options(field)
        if field.kind is FieldKind.NUMERIC:
            return await self._resolve_numeric(field)
        return await self._resolve_text(field, context.job_description)

    # -- identity -----------------------------------------------------------

    def resolve_identity(self, field: Field) -> Answer | None:
        attr = IDENTITY_FIELDS[field.key]
        value = str(getattr(self.profile.resume.personal_information, attr))

        if field.kind.has_options:
            option = next((o for o in field.options if value in o.label), None)
            if option is None:
                if attr == "phone_prefix":
                    raise ResolutionError(f"Country code option containing {value!r} not found")
                log.debug("No %r option contains %r, leaving it as is", field.key, value)
                return None
            return Answer(field=field, option=option, source="profile")

        return Answer(
            field=field,
            value=value,
            autocomplete=field.key in AUTOCOMPLETE_FIELDS,
            source="profile",
        )

    # -- language model -----------------------------------------------------

    async def _ask(self, prompt: str) -> str:
        return clean_output(await self.llm.ask(prompt))

    async def _resolve_options(self, field: Field) -> Answer:
        if not field.options:
            raise ResolutionError(f"{field.kind.value} field {field.label!r} has no options")
        prompt = prompts.build_options_prompt(
            field.label, field.option_labels, self._resume_json, self._preferences_json
        )
        response = await self._ask(prompt)
        option = self.option_strategy.choose(response, field.options)
        log.info("%s %r -> %r", field.kind.value, field.label, option.label)
        return Answer(field=field, option=option)

    async def _resolve_numeric(self, field: Field) -> Answer:
        response = await self._ask(prompts.build_numeric_prompt(field.label, self._resume_json))
        number = extract_number(response)
        if number is None:
            log.warning(
                "Failed to extract number from %r, using default experience: %d",
                response[:80],
                self.default_experience,
            )
            number = self.default_experience
        log.info("NUMERIC %r -> %d", field.label, number)
        return Answer(field=field, value=str(number))

    async def _resolve_text(self, field: Field, job_description: str = "") -> Answer:
        prompt = prompts.build_text_prompt(
            field.label, self._resume_json, self._preferences_json, job_description
        )
        value = await self._ask(prompt)
        log.info("TEXT %r -> %r", field.label, value[:80])
        return Answer(field=field, value=value)

    @staticmethod
    def _reuse(prior: Answer, field: Field) -> Answer:
        """Same question twice on one step: same answer, this field's own locators."""
        option = None
        if prior.option is not None:
            index = next(i for i, o in enumerate(prior.field.options) if o is prior.option)
            option = field.options[index]
        return Answer(field=field, value=prior.value, option=option, autocomplete=prior.autocomplete, source="reused")


def _same_question(a: Field, b: Field) -> bool:
    return (a.label, a.kind, a.option_labels) == (b.label, b.kind, b.option_labels)
