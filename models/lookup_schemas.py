"""
Pydantic models for the employee status lookup pipeline.

These models define the data structures for:
- Backend credentials (Credentials)
- SSO identity resolution (IdentityRecord, IdentityLookupResult)
- Employment information (EmploymentDetail, EmploymentLookupResult)
- Reconciliation (ResolvedCandidate, CanonicalRecord, CandidateSummary,
  ReconciliationReport)
- Lookup outcomes (Found, NoActiveRecord, NotFound)
"""
from typing import Dict, List, Optional, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


ACTIVE_EMPLOYMENT_STATUS = "A"
TERMINATED_EMPLOYMENT_STATUS = "T"


# =============================================================================
# Credentials
# =============================================================================

class Credentials(BaseModel):
    """Long-lived credentials for the UKG / UltiPro SOAP services.

    Attributes:
        customer_key: Customer API key (sent as ClientAccessKey)
        user_key: User API key (sent as UserAccessKey)
        username: Service account username
        password: Service account password
        base_url: Base URL of the services host (e.g. "https://service3.ultipro.ca")
    """
    model_config = ConfigDict(frozen=True)

    customer_key: str = Field(..., min_length=1, description="Customer API key")
    user_key: str = Field(..., min_length=1, description="User API key")
    username: str = Field(..., min_length=1, description="Service account username")
    password: str = Field(..., min_length=1, description="Service account password")
    base_url: str = Field(..., min_length=1, description="Base URL for UKG services")


# =============================================================================
# Identity Resolution
# =============================================================================

class IdentityRecord(BaseModel):
    """One SSO credential entry mapping an email to an employee.

    Uniquely identified by (company_code, employee_number).
    """
    model_config = ConfigDict(frozen=True)

    employee_number: str = Field("", description="Employee number")
    company_code: str = Field("", description="Company code")
    first_name: str = Field("", description="First name if the backend returned one")
    last_name: str = Field("", description="Last name if the backend returned one")
    status: str = Field("1", description="SSO account status")
    client_user_name: str = Field("", description="Client-side SSO username")
    ultipro_user_name: str = Field("", description="UltiPro SSO username")

    @property
    def key(self) -> tuple:
        return (self.company_code, self.employee_number)


class IdentityLookupResult(BaseModel):
    """Identity records resolved for one email, with the raw SOAP payload."""
    model_config = ConfigDict(frozen=True)

    strategy: str = Field(..., description="Name of the lookup strategy used")
    records: List[IdentityRecord] = Field(default_factory=list, description="Records in document order")
    raw_response: Optional[str] = Field(None, description="Raw SOAP response text")


# =============================================================================
# Employment Information
# =============================================================================

class EmploymentDetail(BaseModel):
    """Point-in-time employment information for one identity record.

    Only fields the backend returned are present in ``fields``; absence is
    not an error.
    """
    model_config = ConfigDict(frozen=True)

    fields: Dict[str, str] = Field(default_factory=dict, description="Known employment fields")
    all_fields: Dict[str, str] = Field(
        default_factory=dict,
        description="Every simple element found in the employment block"
    )
    raw_response: Optional[str] = Field(None, description="Raw SOAP response text")

    @property
    def employment_status(self) -> Optional[str]:
        return self.fields.get("employmentStatus")

    @property
    def is_active(self) -> bool:
        return self.employment_status == ACTIVE_EMPLOYMENT_STATUS

    def get(self, name: str) -> Optional[str]:
        return self.fields.get(name)


class EmploymentLookupResult(BaseModel):
    """Result of one employment information call.

    ``detail`` is None when the backend had nothing for the identifier.
    ``fault`` is set only when the call itself failed (transport/HTTP).
    """
    model_config = ConfigDict(frozen=True)

    detail: Optional[EmploymentDetail] = None
    raw_response: Optional[str] = None
    fault: Optional[str] = None


# =============================================================================
# Reconciliation
# =============================================================================

class ResolvedCandidate(BaseModel):
    """Identity record tagged with its resolution order and employment lookup."""
    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=0, description="Position in the identity resolution order")
    identity: IdentityRecord
    employment: Optional[EmploymentLookupResult] = None

    @property
    def detail(self) -> Optional[EmploymentDetail]:
        return self.employment.detail if self.employment else None

    @property
    def is_active(self) -> bool:
        return self.detail is not None and self.detail.is_active


class CanonicalRecord(BaseModel):
    """The identity record selected as authoritative for a lookup."""
    model_config = ConfigDict(frozen=True)

    index: int
    identity: IdentityRecord
    employment: Optional[EmploymentDetail] = None


class CandidateSummary(BaseModel):
    """Per-candidate bookkeeping exposed in the debug projection."""
    model_config = ConfigDict(frozen=True)

    index: int
    employee_number: str
    company_code: str
    first_name: str
    last_name: str
    status: str
    has_employment_details: bool
    employment_status: str = Field(..., description="ACTIVE, TERMINATED, raw code or UNKNOWN")
    raw_employment_status: Optional[str] = None
    is_active: bool = False
    is_selected: bool = False
    employment_fault: Optional[str] = None
    employment_raw_response: Optional[str] = None


class ReconciliationReport(BaseModel):
    """Immutable bookkeeping about how the canonical record was chosen."""
    model_config = ConfigDict(frozen=True)

    total_count: int = 0
    active_count: int = 0
    selection_policy: str = "LAST active record"
    candidates: List[CandidateSummary] = Field(default_factory=list)
    raw_identity_response: Optional[str] = None

    @property
    def multiple_records_found(self) -> bool:
        return self.total_count > 1


# =============================================================================
# Lookup Outcomes
# =============================================================================

class Found(BaseModel):
    """An active canonical record was selected."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["found"] = "found"
    canonical: CanonicalRecord
    report: ReconciliationReport


class NoActiveRecord(BaseModel):
    """Candidates existed but none of them was active."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["no_active_record"] = "no_active_record"
    candidate_count: int = Field(..., ge=1)
    report: ReconciliationReport


class NotFound(BaseModel):
    """No identity record was resolved for the email."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["not_found"] = "not_found"
    report: ReconciliationReport = Field(default_factory=ReconciliationReport)


LookupOutcome = Union[Found, NoActiveRecord, NotFound]
