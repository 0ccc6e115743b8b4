"""
Response Builder mapping a lookup outcome to the JSON wire shape.

Verbose (debug) mode only adds fields; it never changes ``success`` or the
HTTP status. Raw XML payloads appear in verbose responses only.
"""
from typing import Any, Dict, List, Tuple

from models.lookup_schemas import (
    CandidateSummary,
    Found,
    LookupOutcome,
    NoActiveRecord,
    NotFound,
    ReconciliationReport,
)


ASSUMED_ACTIVE_STATUS = "Active (assumed - no employment details available)"
DATA_SOURCE_FULL = "SSO + EmployeeEmploymentInformation Services"
DATA_SOURCE_SSO_ONLY = "SSO Service Only"

NO_ACTIVE_RECORD_ERROR = "No active employee records found"
NO_ACTIVE_RECORD_DETAILS = "All employee records found are terminated or inactive"
NOT_FOUND_ERROR = "User not found"


def build_response(outcome: LookupOutcome, email: str, verbose: bool = False) -> Tuple[Dict[str, Any], int]:
    """Build the response body and HTTP status for an outcome.

    Args:
        outcome: Result of reconciliation
        email: The email that was looked up
        verbose: Add raw upstream payloads and candidate breakdowns

    Returns:
        (body, status_code)
    """
    if isinstance(outcome, Found):
        return _found_response(outcome, email, verbose), 200

    if isinstance(outcome, NoActiveRecord):
        body: Dict[str, Any] = {
            "success": False,
            "error": NO_ACTIVE_RECORD_ERROR,
            "totalRecords": outcome.candidate_count,
            "email": email,
            "details": NO_ACTIVE_RECORD_DETAILS,
        }
        if verbose:
            body["debugModeEnabled"] = True
            body["debugAllRecords"] = [_record_info(c) for c in outcome.report.candidates]
        return body, 404

    if isinstance(outcome, NotFound):
        body = {
            "success": False,
            "error": NOT_FOUND_ERROR,
            "email": email,
        }
        if verbose:
            body["debugModeEnabled"] = True
            if outcome.report.raw_identity_response:
                body["rawSSOResponse"] = outcome.report.raw_identity_response
        return body, 404

    raise TypeError(f"Unsupported lookup outcome: {type(outcome).__name__}")


def _found_response(outcome: Found, email: str, verbose: bool) -> Dict[str, Any]:
    identity = outcome.canonical.identity
    detail = outcome.canonical.employment
    report = outcome.report

    body: Dict[str, Any] = {
        "success": True,
        "employeeNumber": identity.employee_number,
        "companyCode": identity.company_code,
        "firstName": identity.first_name,
        "lastName": identity.last_name,
        "status": identity.status,
        "email": email,
    }

    if detail is not None:
        body["employmentStatus"] = "ACTIVE"
        body["employmentStatusReason"] = "Employment status: A (Active)"
        body["dataSource"] = DATA_SOURCE_FULL
        if detail.get("hireDate"):
            body["hireDate"] = detail.get("hireDate")
        if detail.get("jobTitle"):
            body["jobTitle"] = detail.get("jobTitle")
        if report.multiple_records_found:
            body["note"] = (
                f"Selected last active record from {report.active_count} active records "
                f"out of {report.total_count} total records found"
            )
    else:
        body["employmentStatus"] = ASSUMED_ACTIVE_STATUS
        body["dataSource"] = DATA_SOURCE_SSO_ONLY
        if report.multiple_records_found:
            body["note"] = (
                f"Selected record from {report.total_count} total records found "
                f"(no employment status available)"
            )

    if verbose:
        body.update(_debug_fields(outcome))

    return body


def _debug_fields(outcome: Found) -> Dict[str, Any]:
    detail = outcome.canonical.employment
    report = outcome.report

    fields: Dict[str, Any] = {"debugModeEnabled": True}
    if report.raw_identity_response:
        fields["rawSSOResponse"] = report.raw_identity_response
    if detail is not None:
        fields["debugEmploymentDetails"] = {
            **detail.fields,
            "allDetectedFields": dict(detail.all_fields),
            "rawResponse": detail.raw_response,
        }

    fields["debugAllRecords"] = [_record_info(c) for c in report.candidates]
    fields["debugActiveRecords"] = [
        {
            "employeeNumber": c.employee_number,
            "companyCode": c.company_code,
            "employmentStatus": "ACTIVE",
            "rawEmploymentStatus": c.raw_employment_status,
            "isSelected": c.is_selected,
        }
        for c in report.candidates
        if c.is_active
    ]
    fields["debugTotalRecordCount"] = report.total_count
    fields["debugActiveRecordCount"] = report.active_count
    fields["debugSelectedRecord"] = report.selection_policy
    fields["debugMultipleRecordsFound"] = report.multiple_records_found
    fields["debugAllEmploymentDetails"] = _all_employment_details(report)
    return fields


def _record_info(candidate: CandidateSummary) -> Dict[str, Any]:
    info = {
        "employeeNumber": candidate.employee_number,
        "companyCode": candidate.company_code,
        "firstName": candidate.first_name,
        "lastName": candidate.last_name,
        "status": candidate.status,
        "hasEmploymentDetails": candidate.has_employment_details,
        "employmentStatus": candidate.employment_status,
        "rawEmploymentStatus": candidate.raw_employment_status,
        "isSelected": candidate.is_selected,
        "employmentDetailsRaw": candidate.employment_raw_response,
    }
    if candidate.employment_fault:
        info["employmentLookupError"] = candidate.employment_fault
    return info


def _all_employment_details(report: ReconciliationReport) -> List[Dict[str, Any]]:
    return [
        {
            "companyCode": c.company_code,
            "employeeNumber": c.employee_number,
            "employmentStatus": c.employment_status,
            "rawResponse": c.employment_raw_response,
        }
        for c in report.candidates
        if c.has_employment_details
    ]
