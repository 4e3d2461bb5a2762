"""Shared fixtures for the applybot test suite.

@file conftest.py
@description Provides common fixtures for offline, deterministic testing.
             No live browser, network, or LLM calls.
"""

from __future__ import annotations

import copy

import pytest

from applybot.schemas import AutomationSettings, CandidateProfile

PREFERENCES = {
    "resume_path": "",
    "experience_level": {"entry_level": True, "associate": True, "mid_senior_level": True},
    "work_type": {"remote": True, "hybrid": True},
    "date": {"24_hours": True},
    "positions": ["Software Engineer"],
    "locations": ["Berlin"],
    "distance": 25,
    "company_blacklist": ["Evil Corp"],
    "title_blacklist": ["Staff Engineer", "Manager"],
}

TEXT_RESUME = {
    "personal_information": {
        "firstname": "Ada",
        "lastname": "Lovelace",
        "date_of_birth": "10/12/1990",
        "country": "Germany",
        "city": "Berlin",
        "zip_code": "10115",
        "address": "Unter den Linden 1",
        "phone_prefix": "+49",
        "phone": "1701234567",
        "email": "ada@example.com",
        "github": "https://github.com/ada",
        "linkedin": "https://www.linkedin.com/in/ada",
    },
    "availability": {"notice_period": "1 month"},
    "salary_expectations": {"salary_range": "70000 - 80000 EUR"},
    "self_identification": {
        "gender": "Female",
        "pronouns": "She/Her",
        "veteran": "No",
        "disability": "No",
        "ethnicity": "Prefer not to say",
    },
    "work_preferences": {
        "remote_work": "Yes",
        "in_person_work": "Yes",
        "open_to_relocation": "No",
        "willing_to_complete_assessments": "Yes",
        "willing_to_undergo_drug_tests": "No",
        "willing_to_undergo_background_checks": "Yes",
    },
    "legal_authorization": {
        "requires_us_sponsorship": "Yes",
        "requires_eu_sponsorship": "No",
        "requires_uk_sponsorship": "Yes",
    },
}


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path):
    """Ensure every test gets a clean environment.

    - Points APPLYBOT_DIR to a temp directory to avoid touching real data.
    - Removes every LLM provider variable so resolution tests are deterministic.
    """
    monkeypatch.setenv("APPLYBOT_DIR", str(tmp_path / "applybot"))
    for var in (
        "LLM_URL",
        "LLM_MODEL",
        "LLM_PROVIDER",
        "LLM_API_KEY",
        "GEMINI_API_KEY",
        "OPENAI_API_KEY",
        "ANTHROPIC_API_KEY",
        "CLAUDE_API_KEY",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def resume_pdf(tmp_path):
    path = tmp_path / "resume.pdf"
    path.write_bytes(b"%PDF-1.4\n")
    return path


@pytest.fixture
def preferences_data(resume_pdf) -> dict:
    data = copy.deepcopy(PREFERENCES)
    data["resume_path"] = str(resume_pdf)
    return data


@pytest.fixture
def resume_data() -> dict:
    return copy.deepcopy(TEXT_RESUME)


@pytest.fixture
def profile(preferences_data, resume_data) -> CandidateProfile:
    return CandidateProfile.model_validate({"resume": resume_data, "preferences": preferences_data})


@pytest.fixture
def fast_settings() -> AutomationSettings:
    """No settle delays so wizard tests run instantly."""
    return AutomationSettings(settle_delay=0, typeahead_timeout=0.01, selector_timeout=0.01)
