"""
SOAP client for the UKG / UltiPro web services.

Every call is a single POST to ``{base_url}/services/{service}`` carrying a
SOAP 1.2 envelope with:
1. WS-Addressing headers naming the action URI and destination
2. The UltiPro authentication headers (token + customer key), once a
   session token has been obtained
3. Any operation-specific header fields (login sends its credentials here)
4. A body element holding the operation parameters

The client returns the raw response text; callers carve fields out of it
with ``services.xml_fields``. Each call is stateless and opens its own HTTP
connection, bounded by the configured timeout. There are no retries.
"""
import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional, Union
from xml.sax.saxutils import escape, quoteattr

import httpx

logger = logging.getLogger(__name__)


SOAP_CONTENT_TYPE = "application/soap+xml; charset=utf-8"

SERVICES_NAMESPACE_ROOT = "http://www.ultipro.com/services"
CONTRACTS_NAMESPACE = "http://www.ultipro.com/contracts"
TOKEN_HEADER_NAMESPACE = "http://www.ultimatesoftware.com/foundation/authentication/ultiprotoken"
CLIENT_ACCESS_KEY_NAMESPACE = "http://www.ultimatesoftware.com/foundation/authentication/clientaccesskey"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"


ENVELOPE_TEMPLATE = """<s:Envelope xmlns:s="http://www.w3.org/2003/05/soap-envelope"
            xmlns:a="http://www.w3.org/2005/08/addressing"
            xmlns:svc="{service_namespace}"
            xmlns:contracts="{contracts_namespace}">
  <s:Header>
    <a:Action s:mustUnderstand="1">{action}</a:Action>
    <a:To s:mustUnderstand="1">{url}</a:To>
{header}
  </s:Header>
  <s:Body>
{body}
  </s:Body>
</s:Envelope>"""


@dataclass(frozen=True)
class ContractValue:
    """Typed contract parameter, e.g. an ``EmployeeNumberIdentifier``.

    Rendered as an element carrying ``xsi:type="contracts:{type_name}"`` whose
    children live in the contracts namespace.
    """
    type_name: Optional[str]
    fields: Mapping[str, str] = field(default_factory=dict)


FieldValue = Union[str, ContractValue]


class SoapClient:
    """Stateless SOAP caller for the UKG services host.

    Example:
        client = SoapClient("https://service3.ultipro.ca", customer_key="ABC12")
        xml = await client.invoke(
            "EmployeeSsoUser",
            "GetSsoUserByClientUserName",
            body_fields={"clientUserName": "john.doe@example.com"},
            token=token,
        )
    """

    # Request timeout
    REQUEST_TIMEOUT = 30  # seconds

    def __init__(
        self,
        base_url: str,
        customer_key: str,
        timeout: Optional[float] = None
    ):
        """Initialize the SOAP client.

        Args:
            base_url: Services host, e.g. "https://service3.ultipro.ca"
            customer_key: Customer API key sent as ClientAccessKey
            timeout: Per-call timeout in seconds
        """
        if not base_url:
            raise ValueError("base_url cannot be empty")
        self.base_url = base_url.rstrip("/")
        self.customer_key = customer_key
        self.timeout = timeout if timeout is not None else self.REQUEST_TIMEOUT

    def service_url(self, service: str) -> str:
        return f"{self.base_url}/services/{service}"

    @staticmethod
    def service_namespace(service: str) -> str:
        return f"{SERVICES_NAMESPACE_ROOT}/{service.lower()}"

    @classmethod
    def action_uri(cls, service: str, operation: str) -> str:
        """Action URI in the form ``{namespace}/I{service}/{operation}``."""
        return f"{cls.service_namespace(service)}/I{service}/{operation}"

    async def invoke(
        self,
        service: str,
        operation: str,
        header_fields: Optional[Mapping[str, str]] = None,
        body_fields: Optional[Mapping[str, FieldValue]] = None,
        token: Optional[str] = None,
        body_element: Optional[str] = None
    ) -> str:
        """Call one SOAP operation and return the raw response text.

        Args:
            service: Service name, e.g. "EmployeeSsoUser"
            operation: Operation name, e.g. "GetSsoUserByClientUserName"
            header_fields: Extra service-namespaced header elements
            body_fields: Operation parameters
            token: Session token; adds the authentication header block
            body_element: Body element name (defaults to the operation name)

        Returns:
            Raw response body

        Raises:
            SoapTransportError: Network failure or timeout
            SoapRemoteError: HTTP status indicated failure
        """
        url = self.service_url(service)
        envelope = self.build_envelope(
            service,
            operation,
            header_fields=header_fields,
            body_fields=body_fields,
            token=token,
            body_element=body_element
        )
        headers = {"Content-Type": SOAP_CONTENT_TYPE}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                logger.debug(f"POST {url} ({operation})")
                response = await client.post(url, content=envelope, headers=headers)
                response.raise_for_status()
                text = response.text
                logger.debug(f"{operation} responded {response.status_code}, {len(text)} chars")
                return text

        except httpx.HTTPStatusError as e:
            raise SoapRemoteError(e.response.status_code, e.response.text, operation=operation)
        except httpx.TimeoutException:
            raise SoapTransportError(f"{operation} request timed out after {self.timeout}s")
        except httpx.HTTPError as e:
            raise SoapTransportError(f"{operation} request failed: {e}")

    def build_envelope(
        self,
        service: str,
        operation: str,
        header_fields: Optional[Mapping[str, str]] = None,
        body_fields: Optional[Mapping[str, FieldValue]] = None,
        token: Optional[str] = None,
        body_element: Optional[str] = None
    ) -> str:
        """Render the SOAP envelope for one operation."""
        header_lines = []
        if token is not None:
            header_lines.append(
                f'    <UltiProToken xmlns="{TOKEN_HEADER_NAMESPACE}">{escape(token)}</UltiProToken>'
            )
            header_lines.append(
                f'    <ClientAccessKey xmlns="{CLIENT_ACCESS_KEY_NAMESPACE}">'
                f'{escape(self.customer_key)}</ClientAccessKey>'
            )
        for name, value in (header_fields or {}).items():
            header_lines.append(f"    <svc:{name}>{escape(str(value))}</svc:{name}>")

        element = self._qualify(body_element or operation)
        params = [
            self._render_field(name, value)
            for name, value in (body_fields or {}).items()
        ]
        if params:
            body = f"    <{element}>\n" + "\n".join(params) + f"\n    </{element}>"
        else:
            body = f"    <{element}>\n    </{element}>"

        return ENVELOPE_TEMPLATE.format(
            service_namespace=self.service_namespace(service),
            contracts_namespace=CONTRACTS_NAMESPACE,
            action=self.action_uri(service, operation),
            url=self.service_url(service),
            header="\n".join(header_lines),
            body=body
        )

    @staticmethod
    def _qualify(name: str) -> str:
        return name if ":" in name else f"svc:{name}"

    def _render_field(self, name: str, value: FieldValue) -> str:
        tag = self._qualify(name)
        if isinstance(value, ContractValue):
            type_attr = ""
            if value.type_name:
                type_attr = f' xmlns:i="{XSI_NAMESPACE}" i:type={quoteattr("contracts:" + value.type_name)}'
            children = "\n".join(
                f"        <contracts:{child}>{escape(str(child_value))}</contracts:{child}>"
                for child, child_value in value.fields.items()
            )
            return f"      <{tag}{type_attr}>\n{children}\n      </{tag}>"
        return f"      <{tag}>{escape(str(value))}</{tag}>"


class SoapError(Exception):
    """Error from a UKG SOAP call."""
    pass


class SoapTransportError(SoapError):
    """The request could not complete (network failure or timeout)."""
    pass


class SoapRemoteError(SoapError):
    """The service answered with a failing HTTP status."""

    def __init__(self, status_code: int, body_text: str, operation: Optional[str] = None):
        self.status_code = status_code
        self.body_text = body_text
        self.operation = operation
        label = operation or "SOAP call"
        super().__init__(f"{label} failed with HTTP {status_code}")
