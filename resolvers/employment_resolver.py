"""
Employment Resolver for the EmployeeEmploymentInformation service.

Fetches employment status and details for one identity record, addressed
by its typed EmployeeNumberIdentifier (company code + employee number).

Response handling:
1. Carve GetEmploymentInformationByEmployeeIdentifierResult
2. Check the Success flag
3. Carve Results -> EmploymentInformation
4. Extract every known field (each optional)
5. If EmploymentStatus was not inside the block, search the whole response

No detail (success false, block missing) is a normal outcome. A transport or
HTTP failure is reported as a fault on the result so the pipeline can treat
the record as "employment unknown" and carry on with the other candidates.
"""
import logging
from typing import Optional

from models.lookup_schemas import EmploymentDetail, EmploymentLookupResult
from services.lookup_observer import LookupObserver, default_observer
from services.soap_client import ContractValue, SoapClient, SoapRemoteError, SoapTransportError
from services.xml_fields import extract_block, extract_field, extract_leaf_fields, is_unsuccessful

logger = logging.getLogger(__name__)


EMPLOYMENT_SERVICE = "EmployeeEmploymentInformation"
EMPLOYMENT_OPERATION = "GetEmploymentInformationByEmployeeIdentifier"
EMPLOYMENT_RESULT_ELEMENT = "GetEmploymentInformationByEmployeeIdentifierResult"
EMPLOYEE_IDENTIFIER_TYPE = "EmployeeNumberIdentifier"

KNOWN_EMPLOYMENT_FIELDS = [
    "employmentStatus", "status", "employeeStatus", "employeeStatusCode", "statusCode",
    "hireDate", "startDate", "employmentStartDate", "terminationDate", "endDate",
    "employmentEndDate", "lastWorkDate",
    "jobTitle", "title", "position", "department", "departmentCode",
    "employmentType", "employeeType", "workerType",
    "isActive", "active",
    "employeeId", "employeeNumber", "companyCode",
]


def parse_employment_information(raw: str) -> Optional[EmploymentDetail]:
    """Parse an employment information response.

    Args:
        raw: Raw SOAP response text

    Returns:
        EmploymentDetail, or None when the lookup was unsuccessful or no
        EmploymentInformation block exists
    """
    result_block = extract_block(raw, EMPLOYMENT_RESULT_ELEMENT)
    if result_block is None:
        logger.info(f"No {EMPLOYMENT_RESULT_ELEMENT} found in response")
        return None

    if is_unsuccessful(result_block):
        logger.info("Employment information lookup was not successful")
        return None

    results = extract_block(result_block, "Results")
    if results is None:
        logger.info("No Results found in employment information response")
        return None

    employment_data = extract_block(results, "EmploymentInformation")
    if employment_data is None:
        logger.info("No EmploymentInformation found in Results")
        return None

    fields = {}
    for field_name in KNOWN_EMPLOYMENT_FIELDS:
        value = extract_field(employment_data, field_name)
        if value:
            fields[field_name] = value

    if "employmentStatus" not in fields:
        status = extract_field(raw, "EmploymentStatus")
        if status:
            logger.debug(f"EmploymentStatus found outside EmploymentInformation: {status}")
            fields["employmentStatus"] = status

    logger.debug(f"Extracted employment fields: {', '.join(fields)}")

    return EmploymentDetail(
        fields=fields,
        all_fields=extract_leaf_fields(employment_data),
        raw_response=raw
    )


class EmploymentResolver:
    """Resolves employment details for one (company code, employee number) pair.

    Example:
        resolver = EmploymentResolver(soap_client)
        result = await resolver.resolve_employment(token, "BPML", "100624")
        if result.detail and result.detail.is_active:
            ...
    """

    def __init__(
        self,
        soap_client: SoapClient,
        observer: Optional[LookupObserver] = None
    ):
        self.client = soap_client
        self.observer = default_observer(logger, observer)

    async def resolve_employment(
        self,
        token: str,
        company_code: str,
        employee_number: str
    ) -> EmploymentLookupResult:
        """Fetch employment information for one identity.

        Returns:
            EmploymentLookupResult with ``detail`` set when found, or
            ``fault`` set when the call failed
        """
        identifier = ContractValue(
            type_name=EMPLOYEE_IDENTIFIER_TYPE,
            fields={"CompanyCode": company_code, "EmployeeNumber": employee_number}
        )

        try:
            raw = await self.client.invoke(
                EMPLOYMENT_SERVICE,
                EMPLOYMENT_OPERATION,
                body_fields={"employeeIdentifier": identifier},
                token=token
            )
        except SoapRemoteError as e:
            self.observer.warning(
                "employment.lookup_failed",
                company_code=company_code,
                employee_number=employee_number,
                status_code=e.status_code
            )
            return EmploymentLookupResult(raw_response=e.body_text, fault=str(e))
        except SoapTransportError as e:
            self.observer.warning(
                "employment.lookup_failed",
                company_code=company_code,
                employee_number=employee_number,
                reason=str(e)
            )
            return EmploymentLookupResult(fault=str(e))

        logger.debug(f"{EMPLOYMENT_OPERATION} response for {company_code}-{employee_number}: {raw}")
        detail = parse_employment_information(raw)

        if detail is None:
            self.observer.info(
                "employment.not_found",
                company_code=company_code,
                employee_number=employee_number
            )
        else:
            self.observer.info(
                "employment.resolved",
                company_code=company_code,
                employee_number=employee_number,
                employment_status=detail.employment_status
            )
        return EmploymentLookupResult(detail=detail, raw_response=raw)
