"""
Create the demo SQLite DB used by configs/validators.yaml.

Usage:
    python scripts/make_demo_db.py [--path PATH] [--force]
    dbvalidator check email_available alice@example.com new@example.com
"""

import argparse
import sqlite3
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_DEMO_DB = REPO_ROOT / "data" / "demo.db"


def ensure_demo_db(path: Path, force: bool = False) -> None:
    """Create demo SQLite DB if missing."""
    if path.exists() and not force:
        print(f"✅ Demo DB already exists at {path}")
        return

    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    try:
        conn.executescript(
            """
            DROP TABLE IF EXISTS users;

            CREATE TABLE users (
                id INTEGER PRIMARY KEY,
                email TEXT NOT NULL UNIQUE,
                username TEXT UNIQUE
            );

            INSERT INTO users (id, email, username) VALUES
                (1, 'alice@example.com', 'alice'),
                (2, 'bob@example.com', 'bob'),
                (3, 'claire@example.com', 'claire');
            """
        )
        conn.commit()
    finally:
        conn.close()
    print(f"✅ Demo DB created at {path}")


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--path", default=str(DEFAULT_DEMO_DB))
    parser.add_argument("--force", action="store_true", help="Recreate if present")
    args = parser.parse_args()
    ensure_demo_db(Path(args.path), force=args.force)


if __name__ == "__main__":
    main()
