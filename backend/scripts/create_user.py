"""Register an API user from the command line.

Example:
    python scripts/create_user.py --name Ana --email ana@school.edu --password secret
"""

import argparse
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from sqlmodel import Session  # noqa: E402

from school_api.database import create_db_and_tables, engine  # noqa: E402
from school_api.services import AuthService, ConflictError  # noqa: E402


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create an API user")
    parser.add_argument("--name", required=True)
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    args = parser.parse_args(argv)

    create_db_and_tables()
    with Session(engine) as session:
        try:
            user = AuthService(session).register(args.name, args.email.strip().lower(), args.password)
        except ConflictError as e:
            print(f"error: {e}", file=sys.stderr)
            return 1
    print(f"created user id={user.id} email={user.email}")
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
