"""
Configuration schemas for applybot.

preferences.yaml and text_resume.yaml are validated against these models
before anything touches the browser. A file that does not match is rejected
as a whole; nothing downstream ever sees a partially valid config.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl


# ---------------------------------------------------------------------------
# Work preferences
# ---------------------------------------------------------------------------


class ExperienceLevel(BaseModel):
    internship: bool = False
    entry_level: bool = False
    associate: bool = False
    mid_senior_level: bool = False
    director: bool = False
    executive: bool = False


class WorkType(BaseModel):
    on_site: bool = False
    remote: bool = False
    hybrid: bool = False


class DatePosted(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    hours_24: bool = Field(False, alias="24_hours")
    week: bool = False
    month: bool = False
    all_time: bool = False


class AutomationSettings(BaseModel):
    """Tunables for the wizard and orchestrator. All have working defaults."""

    settle_delay: float = Field(1.0, ge=0)
    max_steps: int = Field(15, ge=1)
    typeahead_timeout: float = Field(10.0, gt=0)
    selector_timeout: float = Field(15.0, gt=0)
    default_experience: int = Field(1, ge=0)
    temperature: float = Field(0.4, ge=0, le=2)
    max_pages: int = Field(1, ge=1)
    close_handled_cards: bool = False
    dry_run: bool = False


class WorkPreferences(BaseModel):
    resume_path: str
    experience_level: ExperienceLevel
    work_type: WorkType
    date: DatePosted
    positions: list[str] = Field(min_length=1)
    locations: list[str] = Field(min_length=1)
    distance: Literal[5, 10, 25, 50, 100]
    company_blacklist: list[str] = Field(default_factory=list)
    title_blacklist: list[str] = Field(default_factory=list)
    automation: AutomationSettings = Field(default_factory=AutomationSettings)


# ---------------------------------------------------------------------------
# Text resume
# ---------------------------------------------------------------------------


class PersonalInformation(BaseModel):
    firstname: str
    lastname: str
    date_of_birth: str
    country: str
    city: str
    zip_code: str
    address: str
    phone_prefix: str
    phone: str
    email: EmailStr
    github: HttpUrl | None = None
    linkedin: HttpUrl | None = None
    website: HttpUrl | None = None


class Availability(BaseModel):
    notice_period: str


class SalaryExpectations(BaseModel):
    salary_range: str


class SelfIdentification(BaseModel):
    gender: str
    pronouns: str
    veteran: str
    disability: str
    ethnicity: str


class ResumeWorkPreferences(BaseModel):
    remote_work: str
    in_person_work: str
    open_to_relocation: str
    willing_to_complete_assessments: str
    willing_to_undergo_drug_tests: str
    willing_to_undergo_background_checks: str


class LegalAuthorization(BaseModel):
    requires_us_sponsorship: str
    requires_eu_sponsorship: str
    requires_uk_sponsorship: str


class TextResume(BaseModel):
    personal_information: PersonalInformation
    availability: Availability
    salary_expectations: SalaryExpectations
    self_identification: SelfIdentification
    work_preferences: ResumeWorkPreferences
    legal_authorization: LegalAuthorization


# ---------------------------------------------------------------------------
# Candidate profile
# ---------------------------------------------------------------------------


class CandidateProfile(BaseModel):
    """Read-only bundle handed to the resolver and the LLM prompts."""

    model_config = ConfigDict(frozen=True)

    resume: TextResume
    preferences: WorkPreferences

    @property
    def settings(self) -> AutomationSettings:
        return self.preferences.automation

    def resume_json(self) -> str:
        return self.resume.model_dump_json()

    def preferences_json(self) -> str:
        # automation tunables are not part of what the candidate "prefers"
        return self.preferences.model_dump_json(exclude={"automation"}, by_alias=True)
