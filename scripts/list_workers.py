"""Script to list an account's workers and spot duplicate names."""

import argparse
import asyncio
import os
import sys
from collections import Counter

# Allow running from the project root without installing
sys.path.append(os.getcwd())

from components.core.init_db import get_db
from components.core.logging_config import setup_logging
from components.user.repository import UserRepository
from components.worker.repository import WorkerRepository


async def list_workers(login: str) -> int:
    """Print every worker of the account with its assignment count."""
    async for db in get_db():
        user = await UserRepository(db).get_by_login(login)
        if not user:
            print(f"No account with login {login!r}")
            return 1

        workers = await WorkerRepository(db, user.id).get_with_assignments()
        if not workers:
            print("No workers found")
            return 0

        print(f"Found {len(workers)} worker(s) for {user.login} (account {user.id}):\n")
        for index, worker in enumerate(workers, start=1):
            print(f"{index}. ID: {worker.id}")
            print(f"   Name: {worker.name}")
            print(f"   Color: {worker.color}")
            print(f"   Primary: {'yes' if worker.is_primary else 'no'}")
            print(f"   Work day assignments: {worker.assignments_count}")
            print(f"   Created: {worker.created_at:%Y-%m-%d %H:%M}")
            print()

        names = Counter(worker.name.strip().casefold() for worker in workers)
        duplicates = [(name, count) for name, count in names.items() if count > 1]
        if duplicates:
            print("Duplicates found:")
            for name, count in duplicates:
                print(f'   - "{name}": {count} records')
        else:
            print("No duplicates found")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--login", required=True, help="account login")
    args = parser.parse_args()

    setup_logging()
    sys.exit(asyncio.run(list_workers(args.login)))


if __name__ == "__main__":
    main()
