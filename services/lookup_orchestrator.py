"""
Employee Lookup Orchestrator for the full email -> employee status workflow.

Orchestrates the sequence:
1. Authenticate against LoginService (fresh token every lookup)
2. Resolve the email to SSO identity records
3. Resolve employment information for each identity (parallel)
4. Reconcile candidates into one outcome
5. Build the JSON response

Uses asyncio for parallel employment lookups. Each candidate keeps its
resolution index, so the reconciliation result does not depend on which
lookup finished first.
"""
import asyncio
import time
from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging

from models.lookup_schemas import (
    EmploymentLookupResult,
    IdentityRecord,
    LookupOutcome,
    ResolvedCandidate,
)
from resolvers.authenticator import Authenticator
from resolvers.employment_resolver import EmploymentResolver
from resolvers.identity_resolver import IdentityResolver, strategy_for
from services.lookup_observer import LookupObserver, default_observer
from services.record_reconciler import reconcile
from services.response_builder import build_response
from services.settings import LookupSettings
from services.soap_client import SoapClient

logger = logging.getLogger(__name__)


class EmployeeLookupOrchestrator:
    """Orchestrates one employee status lookup.

    Example:
        orchestrator = EmployeeLookupOrchestrator.from_env()
        body, status = await orchestrator.run("john.doe@example.com", verbose=True)
    """

    def __init__(
        self,
        settings: LookupSettings,
        soap_client: Optional[SoapClient] = None,
        authenticator: Optional[Authenticator] = None,
        identity_resolver: Optional[IdentityResolver] = None,
        employment_resolver: Optional[EmploymentResolver] = None,
        observer: Optional[LookupObserver] = None
    ):
        """Initialize orchestrator with optional custom components.

        Args:
            settings: Validated lookup settings
            soap_client: SoapClient instance (or None to create from settings)
            authenticator: Authenticator instance (or None to create)
            identity_resolver: IdentityResolver (or None to create with the configured strategy)
            employment_resolver: EmploymentResolver instance (or None to create)
            observer: Event sink shared by all components (or None for logging)
        """
        self.settings = settings
        self.observer = default_observer(logger, observer)
        self.soap_client = soap_client or SoapClient(
            settings.credentials.base_url,
            settings.credentials.customer_key,
            timeout=settings.request_timeout
        )
        self.authenticator = authenticator or Authenticator(
            self.soap_client, settings.credentials, observer=observer
        )
        self.identity_resolver = identity_resolver or IdentityResolver(
            self.soap_client, strategy_for(settings.identity_strategy), observer=observer
        )
        self.employment_resolver = employment_resolver or EmploymentResolver(
            self.soap_client, observer=observer
        )

    @classmethod
    def from_env(cls, observer: Optional[LookupObserver] = None) -> "EmployeeLookupOrchestrator":
        """Create orchestrator from environment variables."""
        return cls(LookupSettings.from_env(require_worker_key=False), observer=observer)

    async def run(self, email: str, verbose: bool = False) -> Tuple[Dict[str, Any], int]:
        """Run a lookup and shape the response.

        Returns:
            (body, status_code)

        Raises:
            AuthenticationError: Login failed; terminal for the request
        """
        outcome = await self.lookup(email)
        return build_response(outcome, email, verbose=verbose)

    async def lookup(self, email: str) -> LookupOutcome:
        """Authenticate, resolve and reconcile the records for one email.

        Raises:
            AuthenticationError: Login failed; terminal for the request
        """
        started = time.monotonic()
        self.observer.info("lookup.started", email=email, strategy=self.settings.identity_strategy)

        token = await self.authenticator.authenticate()

        identities = await self.identity_resolver.resolve_by_email(token, email)
        records = identities.records
        self.observer.info("lookup.identities", email=email, count=len(records))

        candidates = await self._resolve_candidates(token, records)
        outcome = reconcile(candidates, raw_identity_response=identities.raw_response)

        self.observer.info(
            "lookup.completed",
            email=email,
            outcome=outcome.kind,
            total_records=outcome.report.total_count,
            active_records=outcome.report.active_count,
            duration_seconds=round(time.monotonic() - started, 3)
        )
        return outcome

    async def _resolve_candidates(
        self,
        token: str,
        records: Sequence[IdentityRecord]
    ) -> List[ResolvedCandidate]:
        """Attach employment lookups to records, keeping resolution order."""
        if not records:
            return []

        if self.settings.concurrent_employment_lookups:
            tasks = [
                self.employment_resolver.resolve_employment(
                    token, record.company_code, record.employee_number
                )
                for record in records
            ]
            responses = await asyncio.gather(*tasks, return_exceptions=True)
        else:
            responses = []
            for record in records:
                try:
                    responses.append(await self.employment_resolver.resolve_employment(
                        token, record.company_code, record.employee_number
                    ))
                except Exception as e:
                    responses.append(e)

        candidates = []
        for index, (record, response) in enumerate(zip(records, responses)):
            if isinstance(response, BaseException):
                self.observer.warning(
                    "employment.lookup_error",
                    company_code=record.company_code,
                    employee_number=record.employee_number,
                    reason=str(response)
                )
                response = EmploymentLookupResult(fault=f"Employment lookup failed: {response}")
            candidates.append(ResolvedCandidate(index=index, identity=record, employment=response))

        return candidates
