import argparse
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from userhub.database import Database, resolve_database_path
from userhub.models import User


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a UserHub directory entry")
    parser.add_argument("name", help="Display name for the user")
    parser.add_argument("--email", default=None, help="Email address")
    parser.add_argument("--phone", default=None, help="Phone number")
    parser.add_argument("--department", default=None, help="Department name")
    parser.add_argument(
        "--db",
        dest="db_path",
        default=None,
        help="Path to the SQLite database (defaults to USERHUB_DB_PATH or data/userhub.sqlite3)",
    )
    return parser.parse_args()


def _clean(value):
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def main() -> int:
    args = parse_args()

    db_env = args.db_path or os.getenv("USERHUB_DB_PATH")
    db_path = resolve_database_path(db_env)

    database = Database(db_path)
    database.initialize()

    user = database.save_user(
        User(
            name=args.name.strip(),
            email=_clean(args.email),
            phone=_clean(args.phone),
            department=_clean(args.department),
        )
    )

    print(f"Created user #{user.id}: {user.name} <{user.email or 'no email set'}>")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
