"""Database engine setup and initialization."""

import os
from pathlib import Path

import aiosqlite

# Default data directory
DATA_DIR = Path(__file__).parent.parent.parent.parent / "data"

# Environment variable overriding the data directory
DATA_DIR_ENV = "LIFTUP_DATA_DIR"


def get_data_dir() -> Path:
    """Get the data directory path."""
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override)
    return DATA_DIR


def get_db_path(data_dir: Path | None = None) -> Path:
    """Get the database file path."""
    if data_dir is None:
        data_dir = get_data_dir()
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / "liftup.db"


async def init_db(db_path: Path | None = None) -> None:
    """Initialize the database schema."""
    if db_path is None:
        db_path = get_db_path()

    async with aiosqlite.connect(db_path) as db:
        # Exercise catalog
        await db.execute("""
            CREATE TABLE IF NOT EXISTS exercises (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                muscle_groups TEXT NOT NULL DEFAULT '[]',
                equipment TEXT,
                description TEXT DEFAULT '',
                is_built_in INTEGER DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # Week programs; templates and planned exercises live in the structure JSON
        await db.execute("""
            CREATE TABLE IF NOT EXISTS week_programs (
                id TEXT PRIMARY KEY,
                week_number INTEGER NOT NULL,
                start_date TEXT NOT NULL,
                is_active INTEGER DEFAULT 1,
                structure TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # Performed sessions; exercises and sets live in the structure JSON
        await db.execute("""
            CREATE TABLE IF NOT EXISTS workout_sessions (
                id TEXT PRIMARY KEY,
                session_type TEXT NOT NULL,
                week_number INTEGER NOT NULL,
                started_at TEXT NOT NULL,
                completed_at TEXT,
                is_completed INTEGER DEFAULT 0,
                structure TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # Create indexes for common queries
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_exercises_name
            ON exercises(name)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_week_programs_week
            ON week_programs(week_number)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_workout_sessions_type_started
            ON workout_sessions(session_type, started_at)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_workout_sessions_week
            ON workout_sessions(week_number)
        """)

        await db.commit()
