#!/usr/bin/env python
"""Create the Teka Somba tables and seed the reference categories.

Safe to run repeatedly: existing tables and categories are left as they are.

Usage:
    FLASK_ENV=production python init_db.py
"""

import os
import sys

from tekasomba import create_app, db
from tekasomba.errors import StorageFailure
from tekasomba.services.catalog import seed_categories


def init_database(config_name):
    app = create_app(config_name)

    with app.app_context():
        db.create_all()
        try:
            added = seed_categories()
        except StorageFailure:
            print("Category seeding failed, see the log above.")
            return False

        tables = ', '.join(sorted(db.metadata.tables))
        print(f"[{config_name}] tables ready: {tables}")
        print(f"[{config_name}] categories added: {added}")
    return True


if __name__ == '__main__':
    ok = init_database(os.getenv('FLASK_ENV', 'development'))
    sys.exit(0 if ok else 1)
