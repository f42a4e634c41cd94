"""
Tests for data models.
"""

import pytest
from pydantic import ValidationError

from dmoney.models import (
    AccountDocument,
    Actor,
    AppConfig,
    PlatformConfig,
    Role,
    ScenarioConfig,
    TransactionKind,
)


def _actor(role=Role.CUSTOMER, phone="01500000001", **kw) -> Actor:
    return Actor(
        name="Nadia Rahman",
        email="nadia.rahman@example.com",
        password="Pass@123",
        phone=phone,
        nid="123456789",
        role=role,
        **kw,
    )


def test_role_parse():
    assert Role.parse("Agent") is Role.AGENT
    assert Role.parse(Role.MERCHANT) is Role.MERCHANT
    assert Role.parse("agent") is None
    assert Role.parse("Admin") is None


def test_actor_id_defaults_to_none():
    actor = _actor()
    assert actor.id is None
    assert actor.role == Role.CUSTOMER


def test_actor_rejects_unknown_role():
    with pytest.raises(ValidationError):
        _actor(role="Admin")


def test_actor_is_immutable():
    actor = _actor()
    with pytest.raises(ValidationError):
        actor.id = 5
    assert actor.model_copy(update={"id": 5}).id == 5


def test_actor_create_payload_uses_wire_names():
    payload = _actor(role=Role.MERCHANT, phone="01700123456").to_create_payload()
    assert payload == {
        "name": "Nadia Rahman",
        "email": "nadia.rahman@example.com",
        "password": "Pass@123",
        "phone_number": "01700123456",
        "nid": "123456789",
        "role": "Merchant",
    }


def test_actor_serialises_with_phone_key():
    dumped = _actor(id=12).model_dump(mode="json")
    assert dumped["phone"] == "01500000001"
    assert dumped["role"] == "Customer"
    assert dumped["id"] == 12


def test_account_document_for_role():
    doc = AccountDocument.empty()
    doc.for_role(Role.AGENT).append(_actor(role=Role.AGENT))
    assert len(doc.agents) == 1
    assert doc.customers == [] and doc.merchants == []


def test_transaction_kind_paths_and_labels():
    assert TransactionKind.SEND_MONEY.value == "sendMoney"
    assert TransactionKind.SEND_MONEY.label == "Send Money"
    assert TransactionKind("payment") is TransactionKind.PAYMENT


def test_expected_balance_accounts_for_fee():
    assert ScenarioConfig().expected_customer2_balance == 395
    cfg = ScenarioConfig(assumed_payment_fee=1)
    assert cfg.expected_customer2_balance == 399


def test_app_config_defaults():
    config = AppConfig()
    assert config.platform.base_url == "https://dmoney.roadtocareer.net"
    assert config.platform.secret_key == "ROADTOSDET"
    assert config.platform.token is None
    assert config.store.path == "data/users.json"
    assert config.scenario.run_timeout == 60.0


def test_platform_config_override():
    cfg = PlatformConfig(base_url="http://localhost:3000", token="abc", timeout=5)
    assert cfg.token == "abc"
    assert cfg.timeout == 5.0
