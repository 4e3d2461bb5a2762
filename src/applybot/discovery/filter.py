"""Partition discovered postings into ready / blacklisted / already-applied."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from applybot.discovery.blacklist import CompiledPattern, compile_patterns, first_match
from applybot.models import ClassifiedPosting, Posting, PriorState

log = logging.getLogger(__name__)


@dataclass
class FilterResult:
    ready_to_process: list[ClassifiedPosting] = field(default_factory=list)
    blacklisted: list[ClassifiedPosting] = field(default_factory=list)
    already_applied: list[ClassifiedPosting] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.ready_to_process) + len(self.blacklisted) + len(self.already_applied)


def classify_posting(
    posting: Posting,
    title_patterns: Sequence[CompiledPattern],
    company_patterns: Sequence[CompiledPattern],
) -> ClassifiedPosting:
    title_hit = first_match(title_patterns, posting.title)
    company_hit = first_match(company_patterns, posting.company)
    if title_hit:
        log.debug("Title blacklisted: %r matched %r", posting.title, title_hit.phrase)
    if company_hit:
        log.debug("Company blacklisted: %r matched %r", posting.company, company_hit.phrase)
    return ClassifiedPosting(
        posting=posting,
        title_blacklisted=title_hit is not None,
        company_blacklisted=company_hit is not None,
    )


def filter_postings(
    postings: Iterable[Posting],
    title_blacklist: Sequence[str],
    company_blacklist: Sequence[str],
) -> FilterResult:
    """Stable, total partition of postings.

    Blacklisting wins over prior-application state: an applied posting whose
    title is blacklisted lands in ``blacklisted``.
    """
    title_patterns = compile_patterns(title_blacklist)
    company_patterns = compile_patterns(company_blacklist)

    result = FilterResult()
    for posting in postings:
        classified = classify_posting(posting, title_patterns, company_patterns)
        if classified.is_blacklisted:
            result.blacklisted.append(classified)
        elif posting.prior_state is PriorState.APPLIED:
            result.already_applied.append(classified)
        else:
            result.ready_to_process.append(classified)

    log.info(
        "Filtered %d postings: %d ready, %d blacklisted, %d already applied",
        len(result),
        len(result.ready_to_process),
        len(result.blacklisted),
        len(result.already_applied),
    )
    return result
