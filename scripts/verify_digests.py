#!/usr/bin/env python3
"""
Check stored paste contents against their stored SHA-256 digests.

Usage:
    python scripts/verify_digests.py --dsn sqlite:///data/pastes.db
"""

import argparse
from pathlib import Path
import sys

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from pastescrape.errors import StorageConnectionError
from pastescrape.storage import PasteStore
from pastescrape.verify import find_digest_mismatches


def verify(dsn: str) -> bool:
    """
    Compare every content row with its digest.

    Returns True if all rows match, False otherwise.
    """
    print(f"Opening {dsn}...")
    store = PasteStore.from_dsn(dsn)
    checked, mismatches = find_digest_mismatches(store)
    print(f"  Checked {checked} content rows")

    if mismatches:
        print(f"\n❌ DIGEST MISMATCHES: {len(mismatches)} rows")
        for mismatch in mismatches[:5]:
            print(f"   - {mismatch['key']}")
            print(f"     stored={mismatch['stored']} actual={mismatch['actual']}")
        if len(mismatches) > 5:
            print(f"   ... and {len(mismatches) - 5} more")
        return False

    print("✅ All digests match stored content")
    return True


def main():
    parser = argparse.ArgumentParser(description="Verify stored paste digests")
    parser.add_argument("--dsn", default="sqlite:///data/pastes.db",
                        help="SQLAlchemy database URL")

    args = parser.parse_args()

    try:
        success = verify(args.dsn)
    except StorageConnectionError as e:
        print(f"❌ {e}")
        sys.exit(1)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
