"""Parent/admin CLI for inspecting and adjusting the conversation gate."""
from __future__ import annotations

import argparse
import json
from typing import List, Optional

from config import load_config
from config.settings import settings
from storage.settings_store import SettingsStore


def show_status(store: SettingsStore) -> None:
    profile = store.get_child_profile()
    print(f"child age={profile.get('age')} gender={profile.get('gender')}")
    interests = store.get_selected_interests()
    print(f"interests: {', '.join(interests) if interests else '(none)'}")
    print(f"emergency unlocks: {store.get_emergency_unlock_count()}")


def list_interests(store: SettingsStore) -> None:
    for row in store.get_all_interests():
        mark = "x" if row.selected else " "
        print(f"[{mark}] {row.id:>3} {row.name}")


def check_connection(provider: Optional[str]) -> int:
    from api_server import config_path
    from backends import create_backend

    backend = create_backend(load_config(config_path()), provider or settings.AI_PROVIDER)
    result = backend.test_connection()
    print(json.dumps(result, indent=2, ensure_ascii=False))
    stats = backend.usage_stats()
    print(f"tokens={stats.total_tokens} cost=${stats.estimated_cost:.6f}")
    return 0 if result.get("success") else 1


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Curiosity gate admin tools")
    parser.add_argument("--db", default=None, help="Settings database path (default: DB_PATH)")
    parser.add_argument("--status", action="store_true", help="Show child profile, interests and unlock count")
    parser.add_argument("--list-interests", action="store_true", help="List the interest catalogue")
    parser.add_argument("--set-age", type=int, help="Set the child's age")
    parser.add_argument("--set-gender", help="Set the child's gender")
    parser.add_argument("--select", type=int, action="append", default=[], metavar="ID", help="Select an interest")
    parser.add_argument("--deselect", type=int, action="append", default=[], metavar="ID", help="Deselect an interest")
    parser.add_argument("--check-connection", action="store_true", help="Ask the provider a trivial question")
    parser.add_argument("--provider", help="Provider to check (default: AI_PROVIDER)")
    args = parser.parse_args(argv)

    store = SettingsStore(args.db)
    store.initialize()

    if args.set_age is not None or args.set_gender is not None:
        current = store.get_child_profile()
        age = args.set_age if args.set_age is not None else current.get("age")
        gender = args.set_gender if args.set_gender is not None else current.get("gender")
        if not store.update_child_profile(age, gender):
            print("failed to update child profile")
            return 1
    for interest_id in args.select:
        store.update_interest(interest_id, True)
    for interest_id in args.deselect:
        store.update_interest(interest_id, False)

    if args.list_interests:
        list_interests(store)
    if args.status:
        show_status(store)
    if args.check_connection:
        return check_connection(args.provider)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
