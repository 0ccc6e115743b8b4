"""
Unit tests for the EmploymentResolver and employment response parsing.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from resolvers.employment_resolver import (
    EMPLOYMENT_OPERATION,
    EMPLOYMENT_SERVICE,
    EmploymentResolver,
    parse_employment_information,
)
from services.lookup_observer import LookupObserver
from services.soap_client import ContractValue, SoapClient, SoapRemoteError, SoapTransportError


# =============================================================================
# Sample Responses
# =============================================================================

def employment_response(information: str, success: str = "true", outer: str = "") -> str:
    return f"""<s:Envelope xmlns:s="http://www.w3.org/2003/05/soap-envelope">
  <s:Body>
    <GetEmploymentInformationByEmployeeIdentifierResponse xmlns="http://www.ultipro.com/services/employeeemploymentinformation">
      <GetEmploymentInformationByEmployeeIdentifierResult xmlns:b="http://www.ultipro.com/contracts" xmlns:i="http://www.w3.org/2001/XMLSchema-instance">
        <b:OperationMessages/>
        <b:Results>
          <b:EmployeeEmploymentInformation>
            <b:CompanyCode>BPML</b:CompanyCode>
            <b:EmployeeNumber>100624</b:EmployeeNumber>
            {outer}
            {information}
          </b:EmployeeEmploymentInformation>
        </b:Results>
        <b:Success>{success}</b:Success>
      </GetEmploymentInformationByEmployeeIdentifierResult>
    </GetEmploymentInformationByEmployeeIdentifierResponse>
  </s:Body>
</s:Envelope>"""


ACTIVE_INFORMATION = """<b:EmploymentInformation>
              <b:EmploymentStatus>A</b:EmploymentStatus>
              <b:HireDate>2019-03-04T00:00:00</b:HireDate>
              <b:JobTitle>Analyst</b:JobTitle>
              <b:OrgLevel1Code>FIN</b:OrgLevel1Code>
              <b:TerminationDate i:nil="true"/>
            </b:EmploymentInformation>"""


class RecordingObserver(LookupObserver):
    def __init__(self):
        self.events = []

    def event(self, level, name, **fields):
        self.events.append((name, fields))


@pytest.fixture
def mock_soap_client():
    client = MagicMock(spec=SoapClient)
    client.invoke = AsyncMock(return_value=employment_response(ACTIVE_INFORMATION))
    return client


# =============================================================================
# Parsing
# =============================================================================

class TestParseEmploymentInformation:
    """Test employment response parsing."""

    def test_extracts_known_fields(self):
        raw = employment_response(ACTIVE_INFORMATION)

        detail = parse_employment_information(raw)

        assert detail.employment_status == "A"
        assert detail.is_active is True
        assert detail.get("hireDate") == "2019-03-04T00:00:00"
        assert detail.get("jobTitle") == "Analyst"
        assert detail.get("terminationDate") is None
        assert detail.raw_response == raw

    def test_all_fields_include_unknown_elements(self):
        detail = parse_employment_information(employment_response(ACTIVE_INFORMATION))

        assert detail.all_fields["OrgLevel1Code"] == "FIN"
        assert "OrgLevel1Code" not in detail.fields
        assert "TerminationDate" not in detail.all_fields

    def test_falls_back_to_status_outside_block(self):
        information = "<b:EmploymentInformation><b:JobTitle>Clerk</b:JobTitle></b:EmploymentInformation>"
        raw = employment_response(information, outer="<b:EmploymentStatus>T</b:EmploymentStatus>")

        detail = parse_employment_information(raw)

        assert detail.employment_status == "T"
        assert detail.is_active is False

    def test_block_without_status_is_not_active(self):
        information = "<b:EmploymentInformation><b:JobTitle>Clerk</b:JobTitle></b:EmploymentInformation>"

        detail = parse_employment_information(employment_response(information))

        assert detail is not None
        assert detail.employment_status is None
        assert detail.is_active is False

    def test_status_must_be_exactly_a(self):
        information = "<b:EmploymentInformation><b:EmploymentStatus>L</b:EmploymentStatus></b:EmploymentInformation>"
        detail = parse_employment_information(employment_response(information))
        assert detail.is_active is False

    def test_unsuccessful_returns_none(self):
        assert parse_employment_information(employment_response(ACTIVE_INFORMATION, success="false")) is None

    def test_missing_information_block_returns_none(self):
        assert parse_employment_information(employment_response("")) is None

    def test_missing_result_block_returns_none(self):
        assert parse_employment_information("<s:Envelope><s:Body/></s:Envelope>") is None


# =============================================================================
# Resolver
# =============================================================================

class TestEmploymentResolver:
    """Test resolve_employment request shape and failure mapping."""

    @pytest.mark.asyncio
    async def test_sends_typed_identifier(self, mock_soap_client):
        resolver = EmploymentResolver(mock_soap_client)

        result = await resolver.resolve_employment("tok", "BPML", "100624")

        assert result.detail.is_active is True
        assert result.fault is None
        call = mock_soap_client.invoke.call_args
        assert call.args == (EMPLOYMENT_SERVICE, EMPLOYMENT_OPERATION)
        assert call.kwargs["token"] == "tok"
        assert call.kwargs["body_fields"] == {
            "employeeIdentifier": ContractValue(
                "EmployeeNumberIdentifier",
                {"CompanyCode": "BPML", "EmployeeNumber": "100624"}
            )
        }

    @pytest.mark.asyncio
    async def test_no_detail_is_not_a_fault(self, mock_soap_client):
        observer = RecordingObserver()
        mock_soap_client.invoke.return_value = employment_response("", success="false")
        resolver = EmploymentResolver(mock_soap_client, observer=observer)

        result = await resolver.resolve_employment("tok", "BPML", "100624")

        assert result.detail is None
        assert result.fault is None
        assert result.raw_response is not None
        assert observer.events[-1][0] == "employment.not_found"

    @pytest.mark.asyncio
    async def test_http_failure_is_reported_as_fault(self, mock_soap_client):
        mock_soap_client.invoke.side_effect = SoapRemoteError(500, "<Fault/>", operation=EMPLOYMENT_OPERATION)
        resolver = EmploymentResolver(mock_soap_client)

        result = await resolver.resolve_employment("tok", "BPML", "100624")

        assert result.detail is None
        assert "HTTP 500" in result.fault
        assert result.raw_response == "<Fault/>"

    @pytest.mark.asyncio
    async def test_transport_failure_is_reported_as_fault(self, mock_soap_client):
        observer = RecordingObserver()
        mock_soap_client.invoke.side_effect = SoapTransportError("request timed out after 30s")
        resolver = EmploymentResolver(mock_soap_client, observer=observer)

        result = await resolver.resolve_employment("tok", "BPML", "100624")

        assert result.detail is None
        assert result.fault == "request timed out after 30s"
        name, fields = observer.events[-1]
        assert name == "employment.lookup_failed"
        assert fields["employee_number"] == "100624"
