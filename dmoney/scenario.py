"""
Scenario Orchestrator — the scripted Dmoney transaction chain.

Steps run strictly in order; each one threads actors created by earlier
steps into its platform call:

  AUTHENTICATE → CREATE_CUSTOMERS → CREATE_AGENT → CREATE_MERCHANT
  → SEED_AGENT → AGENT_DEPOSIT → CUSTOMER_WITHDRAW → CUSTOMER_SEND
  → CUSTOMER_PAYMENT → VERIFY_BALANCE → DONE

The first failure aborts the run.  Nothing is retried.
"""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable

from dmoney.client import PlatformClient
from dmoney.models import Actor, PlatformConfig, ScenarioConfig

logger = logging.getLogger(__name__)


class ScenarioStep(str, enum.Enum):
    AUTHENTICATE = "authenticate"
    CREATE_CUSTOMERS = "create_customers"
    CREATE_AGENT = "create_agent"
    CREATE_MERCHANT = "create_merchant"
    SEED_AGENT = "seed_agent"
    AGENT_DEPOSIT = "agent_deposit"
    CUSTOMER_WITHDRAW = "customer_withdraw"
    CUSTOMER_SEND = "customer_send"
    CUSTOMER_PAYMENT = "customer_payment"
    VERIFY_BALANCE = "verify_balance"
    DONE = "done"


DEPOSIT_SUCCESS_MESSAGE = "Deposit successful"


class ScenarioCheckFailed(AssertionError):
    """A scripted expectation about the platform's responses did not hold."""


# ---------------------------------------------------------------------------
# Run report
# ---------------------------------------------------------------------------

@dataclass
class StepResult:
    step: ScenarioStep
    passed: bool
    latency_ms: float = 0.0
    detail: str = ""


@dataclass
class ScenarioReport:
    results: list[StepResult] = field(default_factory=list)
    actors: dict[str, Actor] = field(default_factory=dict)
    customer2_balance: float | None = None
    completed: bool = False

    def record(self, r: StepResult):
        self.results.append(r)
        status = "PASS" if r.passed else "FAIL"
        logger.info("[%s] %-18s %8.1fms  (%s)", status, r.step.value, r.latency_ms, r.detail)

    @property
    def passed(self) -> bool:
        """True only for a run that reached DONE with every step passing."""
        return self.completed and all(r.passed for r in self.results)

    def render(self) -> str:
        lines = [f"{'=' * 72}"]
        for r in self.results:
            status = "PASS" if r.passed else "FAIL"
            lines.append(f"  [{status}] {r.step.value:<20s} {r.latency_ms:>8.1f}ms  ({r.detail})")
        total = len(self.results)
        ok = sum(1 for r in self.results if r.passed)
        lines.append(f"{'=' * 72}")
        lines.append(f"  RESULTS: {ok}/{total} steps passed")
        if self.customer2_balance is not None:
            lines.append(f"  CUSTOMER2 BALANCE: {self.customer2_balance} TK")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

class TransactionScenario:
    """
    Drives one run of the transaction chain through a ``PlatformClient``.

    Args:
        client:    A connected platform client
        scenario:  Amounts and the expected final balance
        platform:  Token / admin credentials used by AUTHENTICATE
        report:    Where step results are recorded (kept even if the run aborts)
    """

    def __init__(
        self,
        client: PlatformClient,
        scenario: ScenarioConfig | None = None,
        platform: PlatformConfig | None = None,
        report: ScenarioReport | None = None,
    ):
        self._client = client
        self._scenario = scenario or ScenarioConfig()
        self._platform = platform or PlatformConfig()
        self._state: ScenarioStep | None = None
        self.report = report if report is not None else ScenarioReport()
        self._actors = self.report.actors

    @property
    def state(self) -> ScenarioStep | None:
        """The step currently (or last) executing; DONE after success."""
        return self._state

    def _plan(self) -> list[tuple[ScenarioStep, Callable[[], Awaitable[str]]]]:
        return [
            (ScenarioStep.AUTHENTICATE, self._authenticate),
            (ScenarioStep.CREATE_CUSTOMERS, self._create_customers),
            (ScenarioStep.CREATE_AGENT, self._create_agent),
            (ScenarioStep.CREATE_MERCHANT, self._create_merchant),
            (ScenarioStep.SEED_AGENT, self._seed_agent),
            (ScenarioStep.AGENT_DEPOSIT, self._agent_deposit),
            (ScenarioStep.CUSTOMER_WITHDRAW, self._customer_withdraw),
            (ScenarioStep.CUSTOMER_SEND, self._customer_send),
            (ScenarioStep.CUSTOMER_PAYMENT, self._customer_payment),
            (ScenarioStep.VERIFY_BALANCE, self._verify_balance),
        ]

    async def run(self) -> ScenarioReport:
        """Execute every step in order; raises on the first failure."""
        logger.info("Starting Dmoney transaction scenario")
        for step, action in self._plan():
            self._state = step
            t0 = time.perf_counter()
            try:
                detail = await action()
            except Exception as e:
                self.report.record(StepResult(
                    step=step,
                    passed=False,
                    latency_ms=(time.perf_counter() - t0) * 1000,
                    detail=f"{type(e).__name__}: {e}",
                ))
                raise
            self.report.record(StepResult(
                step=step,
                passed=True,
                latency_ms=(time.perf_counter() - t0) * 1000,
                detail=detail,
            ))
        self._state = ScenarioStep.DONE
        self.report.completed = True
        logger.info("All scenario steps passed")
        return self.report

    # ── Steps ───────────────────────────────────────────────────────────

    async def _authenticate(self) -> str:
        if self._platform.token:
            self._client.set_token(self._platform.token)
            return "using pre-issued token"
        await self._client.login(self._platform.admin_email, self._platform.admin_password)
        return f"logged in as {self._platform.admin_email}"

    async def _create_customers(self) -> str:
        for key in ("customer1", "customer2"):
            self._actors[key] = self._require_id(await self._client.create_customer())
        return f"{self._actors['customer1'].phone}, {self._actors['customer2'].phone}"

    async def _create_agent(self) -> str:
        self._actors["agent"] = self._require_id(await self._client.create_agent())
        return self._actors["agent"].phone

    async def _create_merchant(self) -> str:
        self._actors["merchant"] = self._require_id(await self._client.create_merchant())
        return self._actors["merchant"].phone

    async def _seed_agent(self) -> str:
        s = self._scenario
        resp = await self._client.deposit(
            s.system_account, self._actors["agent"].phone, s.system_seed_amount,
        )
        message = str(resp.get("message", ""))
        _check(
            DEPOSIT_SUCCESS_MESSAGE in message,
            f"expected {DEPOSIT_SUCCESS_MESSAGE!r} in deposit message, got {message!r}",
        )
        return f"{s.system_account} -> agent {s.system_seed_amount} TK"

    async def _agent_deposit(self) -> str:
        amount = self._scenario.agent_deposit_amount
        await self._client.deposit(
            self._actors["agent"].phone, self._actors["customer1"].phone, amount,
        )
        return f"agent -> customer1 {amount} TK"

    async def _customer_withdraw(self) -> str:
        amount = self._scenario.withdraw_amount
        await self._client.withdraw(
            self._actors["customer1"].phone, self._actors["agent"].phone, amount,
        )
        return f"customer1 -> agent {amount} TK"

    async def _customer_send(self) -> str:
        amount = self._scenario.send_amount
        await self._client.send_money(
            self._actors["customer1"].phone, self._actors["customer2"].phone, amount,
        )
        return f"customer1 -> customer2 {amount} TK"

    async def _customer_payment(self) -> str:
        amount = self._scenario.payment_amount
        await self._client.payment(
            self._actors["customer2"].phone, self._actors["merchant"].phone, amount,
        )
        return f"customer2 -> merchant {amount} TK"

    async def _verify_balance(self) -> str:
        expected = self._scenario.expected_customer2_balance
        balance = await self._client.check_balance(self._actors["customer2"].phone)
        self.report.customer2_balance = balance
        _check(
            balance == expected,
            f"customer2 balance {balance} TK, expected {expected} TK "
            f"(includes assumed {self._scenario.assumed_payment_fee} TK payment fee)",
        )
        return f"customer2 balance {balance} TK"

    @staticmethod
    def _require_id(actor: Actor) -> Actor:
        _check(actor.id is not None, f"platform assigned no id to {actor.role.value} {actor.phone}")
        return actor


def _check(condition: bool, message: str):
    if not condition:
        logger.error("Scenario check failed: %s", message)
        raise ScenarioCheckFailed(message)
