"""
Core data models for the Dmoney suite.

Defines the actor records created on the platform, the persisted account
document, transaction kinds, and the configuration tree.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Role(str, enum.Enum):
    """Actor roles known to the platform (wire values are capitalised)."""
    CUSTOMER = "Customer"
    AGENT = "Agent"
    MERCHANT = "Merchant"

    @classmethod
    def parse(cls, value: Role | str) -> Role | None:
        """Return the matching role, or None for anything unrecognised."""
        if isinstance(value, Role):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class TransactionKind(str, enum.Enum):
    """Money-movement operations; the value is the URL segment."""
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    SEND_MONEY = "sendMoney"
    PAYMENT = "payment"

    @property
    def label(self) -> str:
        return _TRANSACTION_LABELS[self]


_TRANSACTION_LABELS = {
    TransactionKind.DEPOSIT: "Deposit",
    TransactionKind.WITHDRAW: "Withdraw",
    TransactionKind.SEND_MONEY: "Send Money",
    TransactionKind.PAYMENT: "Payment",
}


# ---------------------------------------------------------------------------
# Actors & the persisted account document
# ---------------------------------------------------------------------------

class Actor(BaseModel):
    """A customer, agent or merchant created during a run."""
    name: str
    email: str
    password: str
    phone: str
    nid: str
    role: Role
    id: int | None = Field(None, description="Assigned by the platform on creation")

    model_config = {"frozen": True}

    def to_create_payload(self) -> dict[str, str]:
        """Body for ``POST /user/create``."""
        return {
            "name": self.name,
            "email": self.email,
            "password": self.password,
            "phone_number": self.phone,
            "nid": self.nid,
            "role": self.role.value,
        }


class AccountDocument(BaseModel):
    """Actors created across runs, partitioned by role in creation order."""
    customers: list[Actor] = Field(default_factory=list)
    agents: list[Actor] = Field(default_factory=list)
    merchants: list[Actor] = Field(default_factory=list)

    @classmethod
    def empty(cls) -> AccountDocument:
        return cls()

    def for_role(self, role: Role) -> list[Actor]:
        if role is Role.CUSTOMER:
            return self.customers
        if role is Role.AGENT:
            return self.agents
        return self.merchants


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

DEFAULT_BASE_URL = "https://dmoney.roadtocareer.net"


class PlatformConfig(BaseModel):
    """How to reach and authenticate against the platform."""
    base_url: str = DEFAULT_BASE_URL
    secret_key: str = Field("ROADTOSDET", description="Value of the X-AUTH-SECRET-KEY header")
    token: str | None = Field(None, description="Pre-issued admin bearer token; skips login")
    admin_email: str = "admin@roadtocareer.net"
    admin_password: str = "1234"
    timeout: float = 30.0  # per-request, seconds


class StoreConfig(BaseModel):
    path: str = "data/users.json"


class ScenarioConfig(BaseModel):
    """Amounts moved by the scripted transaction chain."""
    system_account: str = "SYSTEM"
    system_seed_amount: float = 2000
    agent_deposit_amount: float = 1500
    withdraw_amount: float = 500
    send_amount: float = 500
    payment_amount: float = 100
    # Platform-side fee charged to customer2 on the payment path. Not computed
    # here: if the platform changes its fee policy, update this value.
    assumed_payment_fee: float = 5
    run_timeout: float = 60.0  # whole-run deadline, seconds

    @property
    def expected_customer2_balance(self) -> float:
        return self.send_amount - self.payment_amount - self.assumed_payment_fee


class AppConfig(BaseModel):
    """Top-level suite configuration."""
    platform: PlatformConfig = Field(default_factory=PlatformConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    scenario: ScenarioConfig = Field(default_factory=ScenarioConfig)
    log_level: str = "INFO"
