"""
Dmoney E2E — command-line entry point.

Loads config, clears the account store, runs the transaction scenario
under the overall deadline, and prints the step report.

Usage:
    dmoney-e2e [path/to/dmoney.yaml]
"""

from __future__ import annotations

import asyncio
import logging
import sys

import httpx

from dmoney.client import PlatformClient, PlatformError
from dmoney.config import load_config
from dmoney.identity import IdentityGenerator
from dmoney.models import AppConfig
from dmoney.scenario import ScenarioCheckFailed, ScenarioReport, TransactionScenario
from dmoney.store import AccountStore

logger = logging.getLogger("dmoney")


async def run_scenario(
    config: AppConfig,
    report: ScenarioReport | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    identities: IdentityGenerator | None = None,
) -> ScenarioReport:
    """
    Clear the store and run one scenario against the configured platform.

    Step results go into ``report`` as they happen, so a caller that passes
    its own report still sees the partial run when a failure propagates.
    """
    report = report if report is not None else ScenarioReport()
    store = AccountStore(config.store.path)
    store.clear_all()

    async with PlatformClient(
        config.platform, store, identities=identities, transport=transport,
    ) as client:
        scenario = TransactionScenario(client, config.scenario, config.platform, report=report)
        await asyncio.wait_for(scenario.run(), timeout=config.scenario.run_timeout)
    return report


async def _main(
    config: AppConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> bool:
    """Run once, print the report, and return whether the run passed."""
    report = ScenarioReport()
    try:
        await run_scenario(config, report, transport=transport)
    except (PlatformError, ScenarioCheckFailed) as e:
        logger.error("Scenario aborted: %s", e)
    except asyncio.TimeoutError:
        logger.error("Scenario exceeded the %.0fs run deadline", config.scenario.run_timeout)
    except httpx.HTTPError as e:
        logger.error("Cannot reach platform at %s: %s", config.platform.base_url, e)

    print(report.render())
    store = AccountStore(config.store.path)
    counts = store.counts()
    logger.info(
        "Accounts recorded in %s: %d customers, %d agents, %d merchants",
        store.path, counts["customers"], counts["agents"], counts["merchants"],
    )
    return report.passed


def main():
    """Run the suite from the command line."""
    config_path = sys.argv[1] if len(sys.argv) > 1 else None
    config = load_config(config_path)

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        datefmt="%H:%M:%S",
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    ok = asyncio.run(_main(config))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
