"""
Create every table declared by the models, leaving existing data untouched.

Development bootstrap only; deployed databases are managed with Alembic.

Usage, from the project root:
  python scripts/init_db.py
"""

import sys

from sqlalchemy import inspect

import salon_api.models  # noqa: F401
from salon_api.db.base import Base
from salon_api.db.session import engine


def main() -> int:
    print(f"[init_db] database: {engine.url.render_as_string(hide_password=True)}")
    before = set(inspect(engine).get_table_names())
    Base.metadata.create_all(bind=engine)
    after = sorted(inspect(engine).get_table_names())

    for name in after:
        marker = "created" if name not in before else "exists"
        print(f"[init_db] {name:<24} {marker}")
    print(f"[init_db] {len(after)} tables")
    return 0


if __name__ == "__main__":
    sys.exit(main())
