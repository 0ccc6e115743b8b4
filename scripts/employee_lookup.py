#!/usr/bin/env python3
"""
Run one employee status lookup against a live UKG backend.

Usage:
    python scripts/employee_lookup.py --email john.doe@example.com
    python scripts/employee_lookup.py --email john.doe@example.com --debug --strategy search

Requires: .env file (or environment) with UKG_CUSTOMER_API_KEY,
UKG_USER_API_KEY, UKG_USERNAME, UKG_PASSWORD and UKG_BASE_URL.

Prints the JSON response and exits 0 when an active employee was found,
1 otherwise.
"""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Add project to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from resolvers.authenticator import AuthenticationError
from services.lookup_orchestrator import EmployeeLookupOrchestrator
from services.settings import ConfigError, LookupSettings


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Look up an employee's active status by email.")
    parser.add_argument("--email", required=True, help="Email address to look up.")
    parser.add_argument("--debug", action="store_true", help="Include raw SOAP payloads and all candidates.")
    parser.add_argument(
        "--strategy",
        choices=["exact", "search"],
        default=None,
        help="Identity lookup strategy (defaults to UKG_IDENTITY_STRATEGY or 'exact')."
    )
    parser.add_argument("--timeout", type=float, default=None, help="Per-call timeout in seconds.")
    parser.add_argument("--sequential", action="store_true", help="Resolve employment records one at a time.")
    parser.add_argument("--env-file", default=None, help="Optional .env file to load.")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level."
    )
    return parser.parse_args()


async def run_lookup(args: argparse.Namespace) -> int:
    try:
        settings = LookupSettings.from_env(require_worker_key=False)
    except ConfigError as exc:
        print(json.dumps({"error": str(exc)}, indent=2))
        return 1

    overrides = {}
    if args.strategy:
        overrides["identity_strategy"] = args.strategy
    if args.timeout:
        overrides["request_timeout"] = args.timeout
    if args.sequential:
        overrides["concurrent_employment_lookups"] = False
    if overrides:
        settings = settings.model_copy(update=overrides)

    orchestrator = EmployeeLookupOrchestrator(settings)
    try:
        body, status = await orchestrator.run(args.email, verbose=args.debug)
    except AuthenticationError as exc:
        print(json.dumps({"error": "Failed to authenticate with UKG API", "details": str(exc)}, indent=2))
        return 1

    print(json.dumps(body, indent=2))
    return 0 if status == 200 else 1


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    if args.env_file:
        load_dotenv(args.env_file)
    else:
        load_dotenv()
    return asyncio.run(run_lookup(args))


if __name__ == "__main__":
    raise SystemExit(main())
