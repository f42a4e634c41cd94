"""
Print the actors recorded by the last scenario run, grouped by role.

Usage:
    python scripts/list_accounts.py [path/to/users.json]
"""
import sys

from dmoney.config import load_config
from dmoney.models import Role
from dmoney.store import AccountStore

path = sys.argv[1] if len(sys.argv) > 1 else load_config().store.path
store = AccountStore(path)
doc = store.load_all()

print(f"Accounts in {store.path}")
for role in Role:
    actors = doc.for_role(role)
    print(f"\n{'─' * 60}")
    print(f"  {role.value}s ({len(actors)})")
    print(f"{'─' * 60}")
    for i, actor in enumerate(actors):
        print(f"  [{i}] id={actor.id!s:<6} {actor.phone}  {actor.name:<24s} {actor.email}")
