"""
Inbound request boundary for employee lookups.

Framework-agnostic: takes the HTTP method, query parameters, JSON body and
headers of a request and returns ``(body, status_code)``. Any web framework
(or a serverless entry point) can wrap it.

Sequence:
1. API key gate (X-API-Key header or Authorization: Bearer <key>)
2. Parameter parsing (GET ?email=&debug=true, POST {"email", "debug"})
3. Configuration validation, before any remote call
4. Lookup via EmployeeLookupOrchestrator
5. Outermost error boundary
"""
import hmac
import logging
import os
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from resolvers.authenticator import AuthenticationError
from services.lookup_orchestrator import EmployeeLookupOrchestrator
from services.settings import ConfigError, LookupSettings

logger = logging.getLogger(__name__)


OrchestratorFactory = Callable[[LookupSettings], EmployeeLookupOrchestrator]

USAGE = 'GET: ?email=user@domain.com or POST: {"email": "user@domain.com"}'
HEADERS_REQUIRED = "X-API-Key: your_api_key"


def extract_api_key(headers: Optional[Mapping[str, str]]) -> Optional[str]:
    """Return the caller's API key from X-API-Key or a bearer Authorization header."""
    normalized = {k.lower(): v for k, v in (headers or {}).items()}
    api_key = normalized.get("x-api-key")
    if api_key:
        return api_key
    authorization = normalized.get("authorization") or ""
    if authorization.startswith("Bearer "):
        return authorization[len("Bearer "):].strip() or None
    return None


def parse_lookup_params(
    method: str,
    query_params: Optional[Mapping[str, Any]] = None,
    json_body: Optional[Any] = None
) -> Tuple[Optional[str], bool]:
    """Return (email, debug) from a GET query string or a POST JSON body."""
    method = method.upper()
    if method == "GET":
        params = query_params or {}
        email = params.get("email")
        debug = params.get("debug") == "true"
    elif method == "POST":
        body = json_body if isinstance(json_body, dict) else {}
        email = body.get("email")
        debug = body.get("debug") is True
    else:
        return None, False

    if isinstance(email, str):
        email = email.strip() or None
    else:
        email = None
    return email, debug


def _error(status: int, **body: Any) -> Tuple[Dict[str, Any], int]:
    return dict(body), status


async def handle_lookup_request(
    method: str,
    query_params: Optional[Mapping[str, Any]] = None,
    json_body: Optional[Any] = None,
    headers: Optional[Mapping[str, str]] = None,
    env: Optional[Mapping[str, str]] = None,
    orchestrator_factory: Optional[OrchestratorFactory] = None
) -> Tuple[Dict[str, Any], int]:
    """Handle one lookup request end to end.

    Args:
        method: HTTP method ("GET" or "POST")
        query_params: Parsed query string
        json_body: Parsed JSON body for POST
        headers: Request headers
        env: Configuration mapping (defaults to ``os.environ``)
        orchestrator_factory: Builds the orchestrator from settings

    Returns:
        (body, status_code)
    """
    env = os.environ if env is None else env
    factory = orchestrator_factory or EmployeeLookupOrchestrator

    try:
        expected_key = env.get("WORKER_API_KEY") or ""
        api_key = extract_api_key(headers)
        if not api_key or not expected_key or not hmac.compare_digest(api_key.encode(), expected_key.encode()):
            return _error(401, error="Unauthorized - Invalid or missing API key", code="INVALID_API_KEY")

        if method.upper() not in ("GET", "POST"):
            return _error(405, error=f"Method {method.upper()} not allowed", usage=USAGE)

        email, debug = parse_lookup_params(method, query_params, json_body)
        if not email:
            return _error(400, error="Email parameter is required", usage=USAGE, headers_required=HEADERS_REQUIRED)

        try:
            settings = LookupSettings.from_env(env)
        except ConfigError as e:
            logger.error(f"Configuration error: {e}")
            return _error(500, error=str(e))

        logger.info(f"Searching for user with email: {email}{' (DEBUG MODE)' if debug else ''}")
        orchestrator = factory(settings)

        try:
            return await orchestrator.run(email, verbose=debug)
        except AuthenticationError as e:
            logger.error(f"Authentication failed: {e}")
            return _error(401, error="Failed to authenticate with UKG API")

    except Exception as e:
        logger.exception(f"Error occurred: {e}")
        return _error(500, error="Internal server error", details=str(e))
