"""Data models for postings and application outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class PriorState(str, Enum):
    APPLIED = "Applied"
    VIEWED = "Viewed"
    NEW = "New"

    @classmethod
    def parse(cls, text: str | None) -> "PriorState":
        """Map the card footer text to a state; anything unknown counts as NEW."""
        value = (text or "").strip()
        for state in cls:
            if state.value == value:
                return state
        return cls.NEW


@dataclass(frozen=True)
class Posting:
    id: str
    title: str
    company: str
    description: str = ""
    prior_state: PriorState = PriorState.NEW
    # driver handle of the search-result card; never persisted
    card: Any = field(default=None, compare=False, repr=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "jobTitle": self.title,
            "company": self.company,
            "description": self.description,
            "state": self.prior_state.value,
        }


@dataclass(frozen=True)
class ClassifiedPosting:
    posting: Posting
    title_blacklisted: bool
    company_blacklisted: bool

    @property
    def is_blacklisted(self) -> bool:
        return self.title_blacklisted or self.company_blacklisted

    def to_dict(self) -> dict:
        return {
            **self.posting.to_dict(),
            "titleBlacklisted": self.title_blacklisted,
            "companyBlacklisted": self.company_blacklisted,
            "isBlacklisted": self.is_blacklisted,
        }


@dataclass(frozen=True)
class ApplicationResult:
    posting: Posting
    processed: bool
    error: str | None = None
    reason: str | None = None
    steps: int = 0
    fill_cycles: int = 0
    # terminal wizard state ("Succeeded" / "Failed"); "" when the wizard never started
    state: str = ""

    @property
    def is_error(self) -> bool:
        return not self.processed

    @classmethod
    def success(cls, posting: Posting, steps: int = 0, fill_cycles: int = 0, state: str = "") -> "ApplicationResult":
        return cls(posting=posting, processed=True, steps=steps, fill_cycles=fill_cycles, state=state)

    @classmethod
    def failure(
        cls,
        posting: Posting,
        error: str,
        reason: str = "error",
        steps: int = 0,
        fill_cycles: int = 0,
        state: str = "",
    ) -> "ApplicationResult":
        return cls(
            posting=posting,
            processed=False,
            error=error,
            reason=reason,
            steps=steps,
            fill_cycles=fill_cycles,
            state=state,
        )

    def to_dict(self) -> dict:
        data = self.posting.to_dict()
        if not self.processed:
            data.update({"isError": True, "error": self.error, "reason": self.reason})
        return data


@dataclass
class BatchResult:
    processed: list[ApplicationResult] = field(default_factory=list)
    unprocessed: list[ApplicationResult] = field(default_factory=list)
    blacklisted: list[ClassifiedPosting] = field(default_factory=list)
    already_applied: list[ClassifiedPosting] = field(default_factory=list)

    def add(self, result: ApplicationResult) -> None:
        (self.processed if result.processed else self.unprocessed).append(result)

    def to_dict(self) -> dict:
        return {
            "processed": [r.to_dict() for r in self.processed],
            "unprocessed": [r.to_dict() for r in self.unprocessed],
            "blacklisted": [c.to_dict() for c in self.blacklisted],
            "alreadyApplied": [c.to_dict() for c in self.already_applied],
        }
