"""
Roll number allow-list.

Roll numbers are imported out of band from a spreadsheet
(scripts/import_rolls.py) into the approved_rolls collection. Registration
only ever asks one question of it: is this roll number on the list?
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List

from pymongo import UpdateOne
from pymongo.collection import Collection

from app.db.mongodb import get_collection, COLLECTIONS
from app.services.mongo_service import utcnow

logger = logging.getLogger(__name__)

# Column headers the import looks for before falling back to the first column
ROLL_COLUMNS = ("rollNumber", "Roll", "roll", "RollNumber", "Roll Number")


class AllowList(ABC):
    """Read-only roll number lookup."""

    @abstractmethod
    def contains(self, roll_number: str) -> bool:
        ...


class MongoAllowList(AllowList):
    """Allow-list backed by the approved_rolls collection."""

    def __init__(self, collection: Collection = None):
        self.collection: Collection = (
            collection if collection is not None else get_collection(COLLECTIONS["approved_rolls"])
        )

    def contains(self, roll_number: str) -> bool:
        return self.collection.find_one({"rollNumber": roll_number}, {"_id": 1}) is not None


# ============================================================
# IMPORT (used by scripts/import_rolls.py)
# ============================================================

def extract_roll_numbers(frame) -> List[str]:
    """
    Unique, trimmed roll numbers from a pandas DataFrame, in file order.

    Uses the first recognised roll number column, or the first column
    when none of ROLL_COLUMNS is present. Blank cells are skipped.
    """
    if frame.empty or len(frame.columns) == 0:
        return []

    column = next((c for c in ROLL_COLUMNS if c in frame.columns), frame.columns[0])

    seen = set()
    rolls = []
    for value in frame[column].tolist():
        if value is None:
            continue
        if isinstance(value, float):
            if value != value:  # NaN
                continue
            if value.is_integer():
                value = int(value)
        roll = str(value).strip()
        if not roll or roll in seen:
            continue
        seen.add(roll)
        rolls.append(roll)
    return rolls


def import_roll_numbers(collection: Collection, roll_numbers: Iterable[str]) -> dict:
    """
    Upsert roll numbers into approved_rolls in one unordered bulk write.

    Returns inserted/updated counts.
    """
    now = utcnow()
    operations = [
        UpdateOne({"rollNumber": roll}, {"$set": {"addedAt": now}}, upsert=True)
        for roll in roll_numbers
    ]
    if not operations:
        return {"inserted": 0, "updated": 0}

    result = collection.bulk_write(operations, ordered=False)
    logger.info("Imported %d roll numbers (%d new)", len(operations), result.upserted_count)
    return {"inserted": result.upserted_count, "updated": result.modified_count}
