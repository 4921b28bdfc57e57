#!/usr/bin/env python3
"""
Create a person directly in the database.

Usage:
  python scripts/add_person.py --env <environment_id> [--user-id external-id]

Without --user-id a bare person is created; with it the person carrying that
userId attribute is returned, or created when missing.
"""
from __future__ import annotations

import argparse
import sys

from people_api.core.cache import TagCache
from people_api.core.config import get_settings
from people_api.core.logging_config import configure_logging
from people_api.domain.ids import is_valid_id
from people_api.repositories.person_repository import PersonRepository
from people_api.repositories.sql_repository import SQLRepository
from people_api.services.person_service import Failure, PersonService


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(description="Create a person in an environment")
    ap.add_argument("--env", required=True, help="Environment id")
    ap.add_argument("--user-id", help="External user id (find-or-create)")
    args = ap.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level)

    env_id = (args.env or "").strip()
    if not is_valid_id(env_id):
        raise SystemExit("Invalid environment id")
    sql_repo = SQLRepository()
    if not sql_repo.get_environment(env_id):
        raise SystemExit(f"Environment '{env_id}' does not exist")

    svc = PersonService(PersonRepository(TagCache(), sql_repo, settings=settings))
    user_id = (args.user_id or "").strip()
    if user_id:
        result = svc.get_or_create_by_user_id(user_id, env_id)
    else:
        result = svc.create(env_id)
    if isinstance(result, Failure):
        raise SystemExit(f"{result.kind}: {result.message}")

    person = result.value
    print("OK: person ready")
    print(f"  ID: {person.id}")
    for name, value in sorted(person.attributes.items()):
        print(f"  {name}: {value}")


if __name__ == "__main__":
    try:
        main()
    except SystemExit:
        raise
    except Exception as exc:  # pragma: no cover - CLI use
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
