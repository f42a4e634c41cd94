"""
Account Store — JSON file of the actors created on the platform.

The whole document is rewritten on every mutation.  A store is bound to one
file path, so tests and parallel runs stay isolated by using separate paths.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from dmoney.models import AccountDocument, Actor, Role

logger = logging.getLogger(__name__)


class AccountStore:
    """
    File-backed mapping of role → actors, in creation order.

    Single-writer: no locking is done between processes sharing a path.
    """

    def __init__(self, path: str | Path = "data/users.json"):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load_all(self) -> AccountDocument:
        """Read the document, or an empty one if missing or unreadable."""
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("No existing accounts file at %s, starting empty", self._path)
            return AccountDocument.empty()
        except OSError as e:
            logger.warning("Cannot read accounts file %s: %s", self._path, e)
            return AccountDocument.empty()

        try:
            return AccountDocument.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning("Ignoring corrupt accounts file %s: %s", self._path, e)
            return AccountDocument.empty()

    def append(self, actor: Actor) -> None:
        """Append ``actor`` to its role's list and rewrite the file."""
        doc = self.load_all()
        doc.for_role(actor.role).append(actor)
        self._write(doc)
        logger.info("Saved %s: %s (%s)", actor.role.value, actor.name, actor.phone)

    def clear_all(self) -> None:
        self._write(AccountDocument.empty())
        logger.info("Cleared all accounts in %s", self._path)

    def get_by_role(self, role: Role | str, index: int = 0) -> Actor | None:
        """Return the ``index``-th actor of ``role``, or None if there is none."""
        parsed = Role.parse(role)
        if parsed is None or index < 0:
            return None
        actors = self.load_all().for_role(parsed)
        if index >= len(actors):
            return None
        return actors[index]

    def counts(self) -> dict[str, int]:
        doc = self.load_all()
        return {
            "customers": len(doc.customers),
            "agents": len(doc.agents),
            "merchants": len(doc.merchants),
        }

    def _write(self, doc: AccountDocument) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w", encoding="utf-8") as fh:
            json.dump(doc.model_dump(mode="json"), fh, indent=2)
