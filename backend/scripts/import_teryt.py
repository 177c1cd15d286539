"""Bulk import of one TERYT dictionary level from a CSV file.

The CSV has a header row with ``code,name`` and, for levels that have a
parent, ``parent_code``. Existing codes are updated in place. The whole file
is imported in a single transaction.

    python scripts/import_teryt.py --level districts --file data/districts.csv
"""
import asyncio
import csv
import os
import sys

from pydantic import ValidationError

# Add backend to path
sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from building_registry.database import async_session
from building_registry.errors import RegistryError
from building_registry.schemas.dictionary import DictionaryEntryCreate
from building_registry.services.dictionary import DictionaryService
from building_registry.services.territory import LEVELS, Level


def read_entries(file_path: str) -> list[DictionaryEntryCreate]:
    entries = []
    with open(file_path, newline="", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f)
        for line_no, row in enumerate(reader, start=2):
            try:
                entries.append(
                    DictionaryEntryCreate(
                        code=(row.get("code") or "").strip(),
                        name=(row.get("name") or "").strip(),
                        parent_code=(row.get("parent_code") or "").strip() or None,
                    )
                )
            except ValidationError as e:
                raise ValueError(f"line {line_no}: {e.errors()[0]['msg']}") from e
    return entries


async def import_teryt(level: Level, file_path: str) -> int:
    print(f"Reading {level.spec.resource} from {file_path}...")
    try:
        entries = read_entries(file_path)
    except ValueError as e:
        print(f"Invalid CSV: {e}")
        return 1
    print(f"Found {len(entries)} rows.")

    async with async_session() as db:
        try:
            result = await DictionaryService(db).import_entries(level, entries)
        except RegistryError as e:
            print(f"Import aborted, nothing was saved: {e.message}")
            return 1

    print(f"Done: {result.created} created, {result.updated} updated.")
    return 0


if __name__ == "__main__":
    import argparse

    resources = [spec.resource for spec in LEVELS.values()]
    parser = argparse.ArgumentParser(description="Import a TERYT dictionary level from CSV")
    parser.add_argument("--level", "-l", required=True, choices=resources,
                        help="Dictionary to import into")
    parser.add_argument("--file", "-f", required=True,
                        help="Path to CSV with code,name[,parent_code] columns")
    args = parser.parse_args()

    if not os.path.exists(args.file):
        print(f"File not found: {args.file}")
        sys.exit(1)

    sys.exit(asyncio.run(import_teryt(Level.from_resource(args.level), args.file)))
