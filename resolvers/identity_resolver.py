"""
Identity Resolver for mapping an email to SSO identity records.

The EmployeeSsoUser service offers two ways to find who an email belongs to,
modelled as two IdentityLookupStrategy variants:

- ExactLookupStrategy ("exact"): GetSsoUserByClientUserName returns at most
  one SSO user for the email. Cheap and the default.
- BroadSearchStrategy ("search"): FindSsoUsers enumerates employees with
  their SSO credentials; every credential whose client or UltiPro username
  equals the email is kept. Used when one email can legitimately map to
  several identities across company codes.

Resolution failures (HTTP or transport) are reported as "no records", never
as a request failure.
"""
import logging
from typing import Dict, List, Optional

from models.lookup_schemas import IdentityLookupResult, IdentityRecord
from services.lookup_observer import LookupObserver, default_observer
from services.soap_client import ContractValue, SoapClient, SoapError, SoapRemoteError
from services.xml_fields import (
    extract_all_blocks,
    extract_block,
    extract_field,
    extract_first_field,
    is_unsuccessful,
)

logger = logging.getLogger(__name__)


SSO_USER_SERVICE = "EmployeeSsoUser"

FIRST_NAME_FIELDS = ("firstName", "givenName", "firstNm")
LAST_NAME_FIELDS = ("lastName", "surname", "lastNm", "familyName")

# Status reported when the SSO record carries none.
DEFAULT_SSO_STATUS = "1"


def extract_identifier(block: Optional[str]) -> Dict[str, str]:
    """Pull CompanyCode/EmployeeNumber, preferring the EmployeeIdentifier sub-block."""
    identifier_block = extract_block(block, "EmployeeIdentifier")
    company_code = extract_field(identifier_block, "companyCode") or extract_field(block, "companyCode")
    employee_number = extract_field(identifier_block, "employeeNumber") or extract_field(block, "employeeNumber")
    return {
        "company_code": company_code or "",
        "employee_number": employee_number or "",
    }


class IdentityLookupStrategy:
    """One way of resolving an email to identity records."""

    name = "base"
    operation = ""
    result_element = ""

    def build_body(self, email: str) -> Dict[str, object]:
        raise NotImplementedError

    def parse(self, raw: str, email: str) -> List[IdentityRecord]:
        raise NotImplementedError

    async def resolve(
        self,
        client: SoapClient,
        token: str,
        email: str
    ) -> IdentityLookupResult:
        raw = await client.invoke(
            SSO_USER_SERVICE,
            self.operation,
            body_fields=self.build_body(email),
            token=token
        )
        return IdentityLookupResult(
            strategy=self.name,
            records=self.parse(raw, email),
            raw_response=raw
        )


class ExactLookupStrategy(IdentityLookupStrategy):
    """Direct lookup of a single SSO user by client username."""

    name = "exact"
    operation = "GetSsoUserByClientUserName"
    result_element = "GetSsoUserByClientUserNameResult"

    def build_body(self, email: str) -> Dict[str, object]:
        return {"clientUserName": email}

    def parse(self, raw: str, email: str) -> List[IdentityRecord]:
        result_block = extract_block(raw, self.result_element)
        if result_block is None:
            logger.info(f"No {self.result_element} found in response")
            return []

        if is_unsuccessful(result_block):
            logger.info(f"SSO user lookup was not successful for {email}")
            return []

        user_data = extract_block(result_block, "Results")
        if user_data is None:
            logger.info("No Results found in SSO user response")
            return []

        identifier = extract_identifier(user_data)
        record = IdentityRecord(
            employee_number=identifier["employee_number"],
            company_code=identifier["company_code"],
            first_name=extract_first_field(user_data, *FIRST_NAME_FIELDS) or "",
            last_name=extract_first_field(user_data, *LAST_NAME_FIELDS) or "",
            status=extract_field(user_data, "status") or DEFAULT_SSO_STATUS,
            client_user_name=extract_field(user_data, "clientUserName") or email,
            ultipro_user_name=extract_field(user_data, "ultiProUserName") or email
        )
        return [record]


class BroadSearchStrategy(IdentityLookupStrategy):
    """Enumerate SSO users and keep every credential matching the email."""

    name = "search"
    operation = "FindSsoUsers"
    result_element = "FindSsoUsersResult"
    employee_element = "EmployeeSsoUser"
    credential_element = "SsoUser"

    def build_body(self, email: str) -> Dict[str, object]:
        return {"query": ContractValue(type_name=None, fields={"ClientUserName": email})}

    def parse(self, raw: str, email: str) -> List[IdentityRecord]:
        result_block = extract_block(raw, self.result_element)
        if result_block is not None and is_unsuccessful(result_block):
            logger.info(f"SSO user search was not successful for {email}")
            return []

        wanted = email.strip().lower()
        records: List[IdentityRecord] = []

        for employee in extract_all_blocks(result_block if result_block is not None else raw, self.employee_element):
            identifier = extract_identifier(employee)
            first_name = extract_first_field(employee, *FIRST_NAME_FIELDS) or ""
            last_name = extract_first_field(employee, *LAST_NAME_FIELDS) or ""

            for credential in extract_all_blocks(employee, self.credential_element):
                client_user_name = extract_field(credential, "clientUserName") or ""
                ultipro_user_name = extract_field(credential, "ultiProUserName") or ""
                if wanted not in (client_user_name.lower(), ultipro_user_name.lower()):
                    continue

                records.append(IdentityRecord(
                    employee_number=identifier["employee_number"],
                    company_code=identifier["company_code"],
                    first_name=first_name,
                    last_name=last_name,
                    status=extract_field(credential, "status") or DEFAULT_SSO_STATUS,
                    client_user_name=client_user_name or email,
                    ultipro_user_name=ultipro_user_name or email
                ))

        return records


STRATEGIES = {
    ExactLookupStrategy.name: ExactLookupStrategy,
    BroadSearchStrategy.name: BroadSearchStrategy,
}


def strategy_for(name: str) -> IdentityLookupStrategy:
    """Return a strategy instance by configured name ("exact" or "search")."""
    try:
        return STRATEGIES[name]()
    except KeyError:
        raise ValueError(f"Unknown identity lookup strategy: {name!r}")


class IdentityResolver:
    """Resolves an email to zero, one or many identity records.

    Example:
        resolver = IdentityResolver(soap_client, strategy_for("search"))
        result = await resolver.resolve_by_email(token, "john.doe@example.com")
        for record in result.records:
            print(record.company_code, record.employee_number)
    """

    def __init__(
        self,
        soap_client: SoapClient,
        strategy: Optional[IdentityLookupStrategy] = None,
        observer: Optional[LookupObserver] = None
    ):
        self.client = soap_client
        self.strategy = strategy or ExactLookupStrategy()
        self.observer = default_observer(logger, observer)

    async def resolve_by_email(self, token: str, email: str) -> IdentityLookupResult:
        """Resolve identity records for an email using the configured strategy.

        Returns:
            IdentityLookupResult; ``records`` is empty when nothing matched or
            the call failed
        """
        self.observer.debug("identity.lookup", email=email, strategy=self.strategy.name)

        try:
            result = await self.strategy.resolve(self.client, token, email)
        except SoapRemoteError as e:
            self.observer.warning(
                "identity.lookup_failed",
                email=email,
                strategy=self.strategy.name,
                status_code=e.status_code
            )
            logger.debug(f"{self.strategy.operation} error body: {e.body_text}")
            return IdentityLookupResult(strategy=self.strategy.name, records=[], raw_response=e.body_text)
        except SoapError as e:
            self.observer.warning(
                "identity.lookup_failed",
                email=email,
                strategy=self.strategy.name,
                reason=str(e)
            )
            return IdentityLookupResult(strategy=self.strategy.name, records=[])

        logger.debug(f"{self.strategy.operation} response: {result.raw_response}")
        self.observer.info(
            "identity.resolved",
            email=email,
            strategy=self.strategy.name,
            count=len(result.records)
        )
        return result
