"""Drop and recreate every table, then re-seed categories.

Development only: all listings, favorites and conversations are lost.

Usage:
    python reset_db.py
"""

import sys

from tekasomba import create_app, db
from tekasomba.services.catalog import seed_categories


def reset_database():
    app = create_app()

    with app.app_context():
        db.drop_all()
        db.create_all()
        added = seed_categories()

    print(f"Schema recreated on {app.config['SQLALCHEMY_DATABASE_URI']}, {added} categories seeded.")


if __name__ == '__main__':
    answer = input("Erase all marketplace data? Type 'yes' to continue: ")
    if answer.strip().lower() != 'yes':
        print("Aborted.")
        sys.exit(0)
    reset_database()
