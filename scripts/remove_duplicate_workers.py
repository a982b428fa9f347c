"""Script to merge an account's workers that share a name.

The survivor is the primary worker if one matches, otherwise the record with
the most work day assignments, otherwise the oldest one. Every other record
hands its assignments to the survivor and is deleted.
"""

import argparse
import asyncio
import os
import sys

# Allow running from the project root without installing
sys.path.append(os.getcwd())

from components.core.exceptions import StoreOperationError
from components.core.init_db import get_db
from components.core.logging_config import setup_logging
from components.user.repository import UserRepository
from components.worker.deduplication import WorkerDeduplicator
from components.worker.repository import WorkerRepository


async def remove_duplicates(login: str, name: str, atomic: bool = False) -> int:
    async for db in get_db():
        user = await UserRepository(db).get_by_login(login)
        if not user:
            print(f"No account with login {login!r}")
            return 1

        deduplicator = WorkerDeduplicator(WorkerRepository(db, user.id))
        candidates = await deduplicator.load_candidates(name)
        print(f'Found {len(candidates)} worker(s) named "{name}":')
        for candidate in candidates:
            worker = candidate.worker
            print(
                f"   ID {candidate.worker_id}: primary={'yes' if worker.is_primary else 'no'}, "
                f"assignments={candidate.assignments_count}, created={worker.created_at:%Y-%m-%d %H:%M}"
            )
        print()

        try:
            result = await deduplicator.deduplicate(name, atomic=atomic)
        except StoreOperationError as e:
            print(f"Merge rolled back: {e.message}")
            return 1

        print(result.message)
        if result.failed_worker_ids:
            print(f"Still present: {', '.join(str(i) for i in result.failed_worker_ids)}")
            print("Run the script again to retry them.")
        return 0 if result.success else 1
    return 1


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--login", required=True, help="account login")
    parser.add_argument("--name", required=True, help="worker name, matched case-insensitively")
    parser.add_argument(
        "--atomic",
        action="store_true",
        help="merge all duplicates in one transaction instead of one at a time",
    )
    args = parser.parse_args()

    setup_logging()
    sys.exit(asyncio.run(remove_duplicates(args.login, args.name, args.atomic)))


if __name__ == "__main__":
    main()
