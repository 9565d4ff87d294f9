#!/usr/bin/env python
"""
Run Alembic against the chat database.

    python scripts/migrate.py upgrade [revision]
    python scripts/migrate.py downgrade <revision>
    python scripts/migrate.py revision "add thread tags"

MIGRATIONS_DATABASE_URL, when set, replaces DATABASE_URL so migrations can be
run from the host against a containerised database.
"""
import argparse
import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

logger = logging.getLogger("migrate")

REPO_ROOT = Path(__file__).resolve().parents[1]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Apply or generate chat database migrations.")
    sub = parser.add_subparsers(dest="action", required=True)

    upgrade = sub.add_parser("upgrade", help="apply migrations")
    upgrade.add_argument("revision", nargs="?", default="head")

    downgrade = sub.add_parser("downgrade", help="revert migrations")
    downgrade.add_argument("revision")

    revision = sub.add_parser("revision", help="autogenerate a migration from the models")
    revision.add_argument("message")
    return parser.parse_args(argv)


def alembic_command(args: argparse.Namespace) -> List[str]:
    base = [sys.executable, "-m", "alembic"]
    if args.action == "revision":
        return base + ["revision", "--autogenerate", "-m", args.message]
    return base + [args.action, args.revision]


def load_environment(root: Path = REPO_ROOT) -> None:
    env_path = root / ".env"
    if env_path.exists():
        load_dotenv(env_path)
    migrations_url = os.getenv("MIGRATIONS_DATABASE_URL")
    if migrations_url:
        os.environ["DATABASE_URL"] = migrations_url


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO)
    args = parse_args(argv)
    load_environment()
    cmd = alembic_command(args)
    logger.info("Running %s", " ".join(cmd[1:]))
    return subprocess.run(cmd, cwd=REPO_ROOT).returncode


if __name__ == "__main__":
    sys.exit(main())
