"""
Identity generation for new platform actors.

Each actor gets a fake full name and email plus a phone number whose
prefix encodes its role.  Pass a seed to get a reproducible sequence.
"""

from __future__ import annotations

from faker import Faker

from dmoney.models import Actor, Role

DEFAULT_PASSWORD = "Pass@123"
PLACEHOLDER_NID = "123456789"

PHONE_PREFIXES = {
    Role.CUSTOMER: "01500",
    Role.AGENT: "01600",
    Role.MERCHANT: "01700",
}
PHONE_SUFFIX_DIGITS = 6


class IdentityGenerator:
    """Builds unsaved ``Actor`` records (no platform id yet)."""

    def __init__(self, seed: int | None = None):
        self._faker = Faker()
        if seed is not None:
            self._faker.seed_instance(seed)

    def phone_for(self, role: Role) -> str:
        suffix = self._faker.random_int(0, 10 ** PHONE_SUFFIX_DIGITS - 1)
        return PHONE_PREFIXES[role] + str(suffix).zfill(PHONE_SUFFIX_DIGITS)

    def generate(self, role: Role) -> Actor:
        return Actor(
            name=self._faker.name(),
            email=self._faker.email().lower(),
            password=DEFAULT_PASSWORD,
            phone=self.phone_for(role),
            nid=PLACEHOLDER_NID,
            role=role,
        )
