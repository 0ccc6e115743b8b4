"""
Configuration for the employee lookup pipeline.

Settings are read from the process environment (or any mapping passed in)
and validated fully before any remote call is attempted. Scripts load a
``.env`` file with python-dotenv before calling ``LookupSettings.from_env``.

Required env vars (checked in this order):
    - UKG_CUSTOMER_API_KEY
    - UKG_USER_API_KEY
    - UKG_USERNAME
    - UKG_PASSWORD
    - UKG_BASE_URL
    - WORKER_API_KEY

Optional env vars:
    - UKG_IDENTITY_STRATEGY: "exact" (default) or "search"
    - UKG_REQUEST_TIMEOUT: per-call timeout in seconds (default 30)
    - UKG_CONCURRENT_EMPLOYMENT_LOOKUPS: "true" (default) or "false"
"""
import os
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from models.lookup_schemas import Credentials


REQUIRED_ENV_VARS = [
    "UKG_CUSTOMER_API_KEY",
    "UKG_USER_API_KEY",
    "UKG_USERNAME",
    "UKG_PASSWORD",
    "UKG_BASE_URL",
    "WORKER_API_KEY",
]

IDENTITY_STRATEGIES = ("exact", "search")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ConfigError(Exception):
    """Required configuration is missing or invalid."""

    def __init__(self, message: str, variable: Optional[str] = None):
        self.variable = variable
        super().__init__(message)


class LookupSettings(BaseModel):
    """Process-wide configuration for one lookup.

    Attributes:
        credentials: UKG service credentials and base URL
        worker_api_key: Shared secret callers must present
        identity_strategy: "exact" lookup by username or broad "search"
        request_timeout: Timeout applied to every SOAP call
        concurrent_employment_lookups: Resolve employment per candidate in parallel
    """
    model_config = ConfigDict(frozen=True)

    credentials: Credentials
    worker_api_key: Optional[str] = None
    identity_strategy: Literal["exact", "search"] = "exact"
    request_timeout: float = Field(30.0, gt=0)
    concurrent_employment_lookups: bool = True

    @classmethod
    def from_env(
        cls,
        env: Optional[Mapping[str, str]] = None,
        require_worker_key: bool = True
    ) -> "LookupSettings":
        """Create settings from environment variables.

        Args:
            env: Mapping to read instead of ``os.environ``
            require_worker_key: Whether WORKER_API_KEY must be set (scripts skip it)

        Raises:
            ConfigError: A required variable is missing or a value is invalid
        """
        env = os.environ if env is None else env

        for name in REQUIRED_ENV_VARS:
            if name == "WORKER_API_KEY" and not require_worker_key:
                continue
            if not (env.get(name) or "").strip():
                raise ConfigError(f"Missing environment variable: {name}", variable=name)

        strategy = (env.get("UKG_IDENTITY_STRATEGY") or "exact").strip().lower()
        if strategy not in IDENTITY_STRATEGIES:
            raise ConfigError(
                f"Invalid UKG_IDENTITY_STRATEGY: {strategy!r} (expected one of {', '.join(IDENTITY_STRATEGIES)})",
                variable="UKG_IDENTITY_STRATEGY"
            )

        timeout_raw = (env.get("UKG_REQUEST_TIMEOUT") or "30").strip()
        try:
            timeout = float(timeout_raw)
        except ValueError:
            raise ConfigError(f"Invalid UKG_REQUEST_TIMEOUT: {timeout_raw!r}", variable="UKG_REQUEST_TIMEOUT")

        concurrent = _parse_bool(
            env.get("UKG_CONCURRENT_EMPLOYMENT_LOOKUPS"),
            default=True,
            variable="UKG_CONCURRENT_EMPLOYMENT_LOOKUPS"
        )

        try:
            return cls(
                credentials=Credentials(
                    customer_key=env["UKG_CUSTOMER_API_KEY"].strip(),
                    user_key=env["UKG_USER_API_KEY"].strip(),
                    username=env["UKG_USERNAME"].strip(),
                    password=env["UKG_PASSWORD"],
                    base_url=env["UKG_BASE_URL"].strip()
                ),
                worker_api_key=env.get("WORKER_API_KEY") or None,
                identity_strategy=strategy,
                request_timeout=timeout,
                concurrent_employment_lookups=concurrent
            )
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}")


def _parse_bool(raw: Optional[str], default: bool, variable: str) -> bool:
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"Invalid {variable}: {raw!r}", variable=variable)
