#!/usr/bin/env python3
"""
Roll Number Import Script

Loads pre-approved roll numbers from a spreadsheet into approved_rolls.
Students registering with one of these roll numbers are approved at once.

Reads the first sheet of an .xlsx/.xls file (or a .csv) and takes the
rollNumber / Roll column, or the first column if neither exists.

Usage: python scripts/import_rolls.py myList.xlsx
"""
import argparse
import sys
from pathlib import Path

sys.path.insert(0, '.')

import pandas as pd

from app.core.config import get_settings
from app.core.logging_config import configure_logging
from app.db.mongodb import COLLECTIONS, get_collection, init_mongo_indexes, test_mongo_connection
from app.services.allow_list import extract_roll_numbers, import_roll_numbers


def read_sheet(path: Path) -> pd.DataFrame:
    # dtype=str keeps leading zeros in roll numbers
    if path.suffix.lower() == ".csv":
        return pd.read_csv(path, dtype=str, keep_default_na=False)
    return pd.read_excel(path, sheet_name=0, dtype=str, keep_default_na=False)


def main():
    parser = argparse.ArgumentParser(description="Import approved roll numbers")
    parser.add_argument("file", nargs="?", default="myList.xlsx", help="spreadsheet to import")
    args = parser.parse_args()

    configure_logging()
    settings = get_settings()
    path = Path(args.file)

    if not path.exists():
        print(f"❌ File not found: {path}")
        sys.exit(1)

    print(f"MongoDB: {settings.mongodb_uri} / {settings.mongodb_db}")
    if not test_mongo_connection():
        print("❌ MongoDB: FAILED")
        sys.exit(1)
    init_mongo_indexes()

    frame = read_sheet(path)
    print(f"Found {len(frame)} rows in {path}.")

    rolls = extract_roll_numbers(frame)
    if not rolls:
        print("No valid roll numbers to import.")
        return

    print(f"Importing {len(rolls)} unique roll numbers...")
    result = import_roll_numbers(get_collection(COLLECTIONS["approved_rolls"]), rolls)
    print("✅ Successfully imported roll numbers!")
    print(f"    Inserted: {result['inserted']}")
    print(f"    Updated: {result['updated']}")


if __name__ == "__main__":
    main()
