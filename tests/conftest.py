"""
Shared fixtures: an in-process fake of the Dmoney platform served through
``httpx.MockTransport``, and isolated account stores.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import httpx
import pytest

from dmoney.client import PlatformClient
from dmoney.identity import IdentityGenerator
from dmoney.models import PlatformConfig
from dmoney.store import AccountStore

BASE_URL = "https://dmoney.test"
ADMIN_EMAIL = "admin@roadtocareer.net"
ADMIN_PASSWORD = "1234"
ADMIN_TOKEN = "admin-token"
SECRET = "ROADTOSDET"


@dataclass
class FakePlatform:
    """
    Minimal ledger with the platform's endpoints.

    ``payment_fee`` is charged to the payer on top of each payment.
    Set ``fail_create`` to make ``/user/create`` reject every request.
    """
    payment_fee: float = 5
    fail_create: bool = False
    omit_token: bool = False
    deposit_message: str = "Deposit successful"
    users: dict[str, dict[str, Any]] = field(default_factory=dict)
    requests: list[httpx.Request] = field(default_factory=list)
    _next_id: int = 1000

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/user/login":
            return self._login(json.loads(request.content))

        if (
            request.headers.get("Authorization") != f"Bearer {ADMIN_TOKEN}"
            or request.headers.get("X-AUTH-SECRET-KEY") != SECRET
        ):
            return httpx.Response(401, json={"error": {"message": "Token expired!"}})

        if path == "/user/create":
            return self._create(json.loads(request.content))
        if path.startswith("/transaction/balance/"):
            return self._balance(path.rsplit("/", 1)[-1])
        if path.startswith("/transaction/"):
            return self._transact(path.rsplit("/", 1)[-1], json.loads(request.content))
        return httpx.Response(404, json={"message": "Not found"})

    def _login(self, body: dict[str, Any]) -> httpx.Response:
        if body.get("email") != ADMIN_EMAIL or body.get("password") != ADMIN_PASSWORD:
            return httpx.Response(401, json={"message": "Password incorrect"})
        if self.omit_token:
            return httpx.Response(200, json={"message": "Login successful"})
        return httpx.Response(200, json={"message": "Login successful", "token": ADMIN_TOKEN})

    def _create(self, body: dict[str, Any]) -> httpx.Response:
        if self.fail_create or body["phone_number"] in self.users:
            return httpx.Response(400, json={"message": "User already exists"})
        self._next_id += 1
        user = {
            "id": self._next_id,
            "name": body["name"],
            "email": body["email"],
            "phone_number": body["phone_number"],
            "role": body["role"],
        }
        self.users[body["phone_number"]] = {**user, "balance": 0}
        return httpx.Response(201, json={"message": "User created", "user": user})

    def _transact(self, kind: str, body: dict[str, Any]) -> httpx.Response:
        src, dst, amount = body["from_account"], body["to_account"], body["amount"]
        if dst not in self.users or (src != "SYSTEM" and src not in self.users):
            return httpx.Response(404, json={"message": "Account does not exist"})
        fee = self.payment_fee if kind == "payment" else 0
        if src != "SYSTEM":
            if self.users[src]["balance"] < amount + fee:
                return httpx.Response(400, json={"message": "Insufficient balance"})
            self.users[src]["balance"] -= amount + fee
        self.users[dst]["balance"] += amount
        messages = {
            "deposit": self.deposit_message,
            "withdraw": "Withdraw successful",
            "sendMoney": "Send money successful",
            "payment": "Payment successful",
        }
        return httpx.Response(201, json={"message": messages[kind], "trnxId": f"TXN{len(self.requests)}"})

    def _balance(self, phone: str) -> httpx.Response:
        if phone not in self.users:
            return httpx.Response(404, json={"message": "User not found"})
        return httpx.Response(200, json={"message": "User balance", "balance": self.users[phone]["balance"]})


@pytest.fixture
def fake_platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def store(tmp_path) -> AccountStore:
    return AccountStore(tmp_path / "data" / "users.json")


@pytest.fixture
def platform_config() -> PlatformConfig:
    return PlatformConfig(base_url=BASE_URL)


@pytest.fixture
def make_client(fake_platform, store, platform_config):
    """Factory for clients wired to the fake platform (use with ``async with``)."""

    def _make(token: str | None = None, seed: int = 7) -> PlatformClient:
        config = platform_config.model_copy(update={"token": token})
        return PlatformClient(
            config,
            store,
            identities=IdentityGenerator(seed=seed),
            transport=fake_platform.transport(),
        )

    return _make
