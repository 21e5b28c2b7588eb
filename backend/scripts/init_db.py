"""Create the database tables for the configured `DATABASE_URL`.

Intended for local development and quick bootstrapping of the example
database; it is safe to run repeatedly.
"""

import os
import sys

# Ensure backend folder is on sys.path so `school_api` can be imported from a checkout
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from school_api.config import settings  # noqa: E402
from school_api.database import create_db_and_tables  # noqa: E402


def run():
    print("Using database:", settings.DATABASE_URL)
    create_db_and_tables()
    print("Tables ready.")


if __name__ == '__main__':
    run()
