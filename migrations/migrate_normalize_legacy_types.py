#!/usr/bin/env python3
"""Migration script to rewrite legacy transaction types and statuses.

Older databases store transaction types under legacy names and use the
generic "completed" status. This migration rewrites them in place:
- cheque → cheque_received, deposit → cash_deposit, transfer → bank_transfer_in,
  settlement → upi_settlement, online/online_transfer → neft,
  internal_transfer → account_transfer, other → bank_charge (with an
  "other" charge detail record when the row has none)
- completed → the completion status of the (canonical) type

Balances are unaffected: every legacy status that moved money maps onto a
status that moves money the same way.

Usage:
    python migrations/migrate_normalize_legacy_types.py [--db-path PATH]
"""

import sys
from pathlib import Path

# Add src to path so we can import passbook modules
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sqlalchemy import inspect
from passbook.database.factories import create_sqlite_database
from passbook.database.legacy import normalize_legacy_rows


def migrate_database(database_path: str | None = None) -> dict[str, int]:
    """Rewrite legacy values in the transactions table.

    Args:
        database_path: Path to database file. If None, uses default location.

    Returns:
        Counts of rewritten types and statuses
    """
    db = create_sqlite_database(database_path=database_path)
    db.connect()

    try:
        session = db.session_factory()
        try:
            if "transactions" not in inspect(session.bind).get_table_names():
                raise RuntimeError(
                    "Table 'transactions' does not exist. Please initialize the database schema first."
                )

            print("Starting migration: normalizing legacy transaction types...")
            counts = normalize_legacy_rows(session)
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        print(f"  Rewrote {counts['types']} legacy transaction type(s)")
        print(f"  Rewrote {counts['statuses']} 'completed' status(es)")
        print(f"  Added {counts['details']} bank charge detail record(s)")
        print("Migration completed successfully!")
        return counts
    finally:
        db.disconnect()


def main():
    """Main entry point for migration script."""
    import argparse

    parser = argparse.ArgumentParser(description="Rewrite legacy transaction types and statuses")
    parser.add_argument(
        "--db-path",
        type=str,
        help="Path to database file (overrides PASSBOOK_DB_PATH environment variable)",
    )
    args = parser.parse_args()

    try:
        migrate_database(database_path=args.db_path)
        return 0
    except Exception as e:
        print(f"\nMigration failed: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
