"""
Platform Client — typed async wrapper over the Dmoney REST API.

One method per remote operation.  Every method sends the auth headers,
parses the JSON body, and either returns the typed result or raises a
``PlatformError`` subclass carrying the raw response payload.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from dmoney.identity import IdentityGenerator
from dmoney.models import Actor, PlatformConfig, Role, TransactionKind
from dmoney.store import AccountStore

logger = logging.getLogger(__name__)

SECRET_HEADER = "X-AUTH-SECRET-KEY"


class PlatformClient:
    """
    Async client for a single scenario run.

    Args:
        config:      Base URL, secret header value, timeout, optional token
        store:       Where created actors are recorded
        identities:  Source of randomised actor identities
        transport:   Optional httpx transport (tests inject a MockTransport)
    """

    def __init__(
        self,
        config: PlatformConfig,
        store: AccountStore,
        identities: IdentityGenerator | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._config = config
        self._store = store
        self._identities = identities or IdentityGenerator()
        self._transport = transport
        self._token = config.token or ""
        self._session: httpx.AsyncClient | None = None

    async def connect(self):
        self._session = httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            headers={"Content-Type": "application/json"},
            transport=self._transport,
        )
        logger.debug("Platform client connected to %s", self._config.base_url)

    async def close(self):
        if self._session:
            await self._session.aclose()
            self._session = None

    async def __aenter__(self) -> PlatformClient:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: Any):
        await self.close()

    # ── Auth ────────────────────────────────────────────────────────────

    @property
    def token(self) -> str:
        return self._token

    def set_token(self, token: str):
        self._token = token

    async def login(self, email: str, password: str) -> str:
        """Log in and keep the returned session token."""
        status, data, ok = await self._request(
            "POST", "/user/login",
            body={"email": email, "password": password},
            authenticated=False,
        )
        token = data.get("token")
        if not ok or not token:
            raise self._fail(AuthenticationFailure, "Login failed", status, data)
        self._token = token
        logger.info("Successfully logged in as: %s", email)
        return token

    # ── Actors ──────────────────────────────────────────────────────────

    async def create_actor(self, role: Role) -> Actor:
        """Register a freshly generated actor and record it in the store."""
        actor = self._identities.generate(role)
        status, data, ok = await self._request(
            "POST", "/user/create", body=actor.to_create_payload(),
        )
        user = data.get("user")
        if not ok or not isinstance(user, dict) or not user:
            raise self._fail(
                ActorCreationFailure,
                f"Failed to create {role.value.lower()}",
                status,
                data,
            )
        created = actor.model_copy(update={"id": user.get("id")})
        self._store.append(created)
        logger.info("Created %s: %s | Phone: %s", role.value, created.name, created.phone)
        return created

    async def create_customer(self) -> Actor:
        return await self.create_actor(Role.CUSTOMER)

    async def create_agent(self) -> Actor:
        return await self.create_actor(Role.AGENT)

    async def create_merchant(self) -> Actor:
        return await self.create_actor(Role.MERCHANT)

    # ── Transactions ────────────────────────────────────────────────────

    async def transact(
        self, kind: TransactionKind, from_phone: str, to_phone: str, amount: float,
    ) -> dict[str, Any]:
        """Move ``amount`` between two accounts and return the raw payload."""
        status, data, ok = await self._request(
            "POST", f"/transaction/{kind.value}",
            body={"from_account": from_phone, "to_account": to_phone, "amount": amount},
        )
        if not ok:
            raise self._fail(TransactionFailure, f"{kind.label} failed", status, data, kind=kind)
        logger.info("%s: %s -> %s | Amount: %s TK", kind.label, from_phone, to_phone, amount)
        return data

    async def deposit(self, from_phone: str, to_phone: str, amount: float) -> dict[str, Any]:
        return await self.transact(TransactionKind.DEPOSIT, from_phone, to_phone, amount)

    async def withdraw(self, from_phone: str, to_phone: str, amount: float) -> dict[str, Any]:
        return await self.transact(TransactionKind.WITHDRAW, from_phone, to_phone, amount)

    async def send_money(self, from_phone: str, to_phone: str, amount: float) -> dict[str, Any]:
        return await self.transact(TransactionKind.SEND_MONEY, from_phone, to_phone, amount)

    async def payment(self, from_phone: str, to_phone: str, amount: float) -> dict[str, Any]:
        return await self.transact(TransactionKind.PAYMENT, from_phone, to_phone, amount)

    async def check_balance(self, phone: str) -> float:
        status, data, ok = await self._request("GET", f"/transaction/balance/{phone}")
        balance = data.get("balance")
        if not ok or balance is None or isinstance(balance, bool):
            raise self._fail(BalanceCheckFailure, "Failed to check balance", status, data)
        try:
            balance = float(balance)
        except (TypeError, ValueError):
            raise self._fail(BalanceCheckFailure, "Non-numeric balance", status, data)
        logger.info("Balance for %s: %s TK", phone, balance)
        return balance

    # ── Internals ───────────────────────────────────────────────────────

    def _headers(self, authenticated: bool) -> dict[str, str]:
        if not authenticated:
            return {}
        return {
            "Authorization": f"Bearer {self._token}",
            SECRET_HEADER: self._config.secret_key,
        }

    async def _request(
        self,
        method: str,
        url: str,
        body: dict[str, Any] | None = None,
        authenticated: bool = True,
    ) -> tuple[int, dict[str, Any], bool]:
        """Send a request; return (status, payload, is_success)."""
        if self._session is None:
            raise RuntimeError("PlatformClient is not connected; call connect() first")

        resp = await self._session.request(
            method, url, headers=self._headers(authenticated), json=body,
        )
        try:
            data = resp.json()
        except ValueError:
            data = {"error": resp.text}
        if not isinstance(data, dict):
            data = {"data": data}
        return resp.status_code, data, resp.is_success

    @staticmethod
    def _fail(
        exc_type: type[PlatformError],
        summary: str,
        status: int,
        payload: dict[str, Any],
        **extra: Any,
    ) -> PlatformError:
        logger.error("%s [%d]: %s", summary, status, payload)
        return exc_type(summary, status_code=status, payload=payload, **extra)


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------

class PlatformError(Exception):
    """A platform call was rejected or returned an incomplete response."""

    def __init__(self, summary: str, status_code: int, payload: dict[str, Any]):
        super().__init__(f"{summary}: {json.dumps(payload, default=str)}")
        self.summary = summary
        self.status_code = status_code
        self.payload = payload


class AuthenticationFailure(PlatformError):
    """Login rejected, or no token in the response."""


class ActorCreationFailure(PlatformError):
    """Actor creation rejected, or no created user in the response."""


class TransactionFailure(PlatformError):
    """Deposit, withdraw, send-money or payment rejected."""

    def __init__(
        self,
        summary: str,
        status_code: int,
        payload: dict[str, Any],
        kind: TransactionKind | None = None,
    ):
        super().__init__(summary, status_code=status_code, payload=payload)
        self.kind = kind


class BalanceCheckFailure(PlatformError):
    """Balance lookup rejected, or no balance in the response."""
