"""
Record Reconciler for choosing one canonical identity per lookup.

Policy, applied in order:
1. No candidates -> NotFound
2. Active candidates are those whose employment status is exactly "A";
   a candidate without employment detail is never active
3. No active candidates -> NoActiveRecord(candidate_count=total)
4. Otherwise the LAST active candidate in resolution order is canonical

Candidates are ordered by their resolution index first, so the result does
not depend on the order in which concurrent employment lookups finished.

TODO: confirm with HR/product whether "last active" is intended; the
backend data gives no reason to prefer it over e.g. most recent hire date.
"""
import logging
from typing import List, Optional, Sequence

from models.lookup_schemas import (
    ACTIVE_EMPLOYMENT_STATUS,
    TERMINATED_EMPLOYMENT_STATUS,
    CandidateSummary,
    CanonicalRecord,
    Found,
    LookupOutcome,
    NoActiveRecord,
    NotFound,
    ReconciliationReport,
    ResolvedCandidate,
)

logger = logging.getLogger(__name__)


SELECTION_POLICY = "LAST active record"


def employment_status_label(candidate: ResolvedCandidate) -> str:
    """ACTIVE / TERMINATED for the known codes, the raw code otherwise, UNKNOWN without detail."""
    detail = candidate.detail
    if detail is None:
        return "UNKNOWN"
    status = detail.employment_status
    if status == ACTIVE_EMPLOYMENT_STATUS:
        return "ACTIVE"
    if status == TERMINATED_EMPLOYMENT_STATUS:
        return "TERMINATED"
    return status or "UNKNOWN"


def summarize(candidate: ResolvedCandidate, selected_index: Optional[int]) -> CandidateSummary:
    identity = candidate.identity
    employment = candidate.employment
    detail = candidate.detail
    return CandidateSummary(
        index=candidate.index,
        employee_number=identity.employee_number,
        company_code=identity.company_code,
        first_name=identity.first_name,
        last_name=identity.last_name,
        status=identity.status,
        has_employment_details=detail is not None,
        employment_status=employment_status_label(candidate),
        raw_employment_status=detail.employment_status if detail else None,
        is_active=candidate.is_active,
        is_selected=candidate.index == selected_index,
        employment_fault=employment.fault if employment else None,
        employment_raw_response=employment.raw_response if employment else None
    )


def reconcile(
    candidates: Sequence[ResolvedCandidate],
    raw_identity_response: Optional[str] = None
) -> LookupOutcome:
    """Apply the active-record selection policy.

    Args:
        candidates: Identity records tagged with resolution index and
            employment lookup results, in any order
        raw_identity_response: Raw SSO response kept for the debug projection

    Returns:
        Found, NoActiveRecord or NotFound
    """
    ordered: List[ResolvedCandidate] = sorted(candidates, key=lambda c: c.index)

    if not ordered:
        return NotFound(report=ReconciliationReport(raw_identity_response=raw_identity_response))

    active = [c for c in ordered if c.is_active]
    selected = active[-1] if active else None
    selected_index = selected.index if selected else None

    report = ReconciliationReport(
        total_count=len(ordered),
        active_count=len(active),
        selection_policy=SELECTION_POLICY,
        candidates=[summarize(c, selected_index) for c in ordered],
        raw_identity_response=raw_identity_response
    )

    if selected is None:
        logger.info(f"No active records among {len(ordered)} candidate(s)")
        return NoActiveRecord(candidate_count=len(ordered), report=report)

    logger.info(
        f"Selected record {selected.identity.company_code}-{selected.identity.employee_number} "
        f"({len(active)} active of {len(ordered)})"
    )
    return Found(
        canonical=CanonicalRecord(
            index=selected.index,
            identity=selected.identity,
            employment=selected.detail
        ),
        report=report
    )
