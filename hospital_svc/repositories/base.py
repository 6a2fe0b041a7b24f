"""
Base database connection and initialization.

This module handles database connection management and schema initialization.
Optimized for SQLite concurrency with WAL mode and busy_timeout.

IMPORTANT: Database instantiation should be done through the DI layer.
Use core.dependencies.get_database() instead of instantiating directly.
"""
import json
import sqlite3
import logging
from typing import Any, Dict, Iterable, List, Optional
from pathlib import Path

from core.config import DATABASE_PATH, DATABASE_BUSY_TIMEOUT

logger = logging.getLogger(__name__)


TABLES = (
    "users",
    "doctors",
    "inventory_items",
    "lab_inventory",
    "lab_stock_history",
    "lab_tests",
    "leave_requests",
    "appointments",
    "prescriptions",
    "notifications",
)

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        email TEXT UNIQUE NOT NULL,
        role TEXT NOT NULL,
        mobile_number TEXT,
        is_active INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS doctors (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        specialization TEXT NOT NULL,
        license_number TEXT UNIQUE NOT NULL,
        qualifications TEXT NOT NULL DEFAULT '[]',
        experience INTEGER NOT NULL DEFAULT 0,
        schedule TEXT NOT NULL DEFAULT '[]',
        max_patients_per_day INTEGER NOT NULL DEFAULT 20,
        is_active INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY (user_id) REFERENCES users(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS inventory_items (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        category TEXT NOT NULL,
        quantity INTEGER NOT NULL CHECK (quantity >= 0),
        min_stock_level INTEGER NOT NULL CHECK (min_stock_level >= 0),
        unit TEXT NOT NULL,
        price REAL NOT NULL CHECK (price >= 0),
        supplier TEXT,
        last_restocked TEXT,
        expiry_date TEXT,
        is_active INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS lab_inventory (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT UNIQUE NOT NULL,
        current_stock REAL NOT NULL CHECK (current_stock >= 0),
        min_required REAL NOT NULL CHECK (min_required > 0),
        status TEXT NOT NULL,
        updated_by INTEGER,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY (updated_by) REFERENCES users(id)
    )
    """,
    # Append-only: rows are inserted alongside stock changes and never updated
    """
    CREATE TABLE IF NOT EXISTS lab_stock_history (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        item_id INTEGER NOT NULL,
        quantity REAL NOT NULL,
        operation TEXT NOT NULL CHECK (operation IN ('add', 'remove')),
        date TEXT NOT NULL,
        updated_by INTEGER,
        notes TEXT,
        FOREIGN KEY (item_id) REFERENCES lab_inventory(id) ON DELETE CASCADE,
        FOREIGN KEY (updated_by) REFERENCES users(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS lab_tests (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        patient_id INTEGER NOT NULL,
        requested_by INTEGER NOT NULL,
        test_type TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'Requested',
        results TEXT,
        findings TEXT,
        notes TEXT,
        sample_collection_date TEXT,
        result_date TEXT,
        priority TEXT NOT NULL DEFAULT 'Normal',
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY (patient_id) REFERENCES users(id),
        FOREIGN KEY (requested_by) REFERENCES users(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS leave_requests (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        doctor_id INTEGER NOT NULL,
        doctor_name TEXT NOT NULL,
        leave_type TEXT NOT NULL,
        start_date TEXT NOT NULL,
        end_date TEXT NOT NULL,
        reason TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'Pending',
        approved_by INTEGER,
        approval_comments TEXT,
        submitted_at TEXT NOT NULL,
        reviewed_at TEXT,
        total_days INTEGER NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS appointments (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        patient_id INTEGER NOT NULL,
        doctor_id INTEGER NOT NULL,
        date TEXT NOT NULL,
        time TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'Scheduled',
        reason TEXT,
        notes TEXT,
        reminder_sent INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY (patient_id) REFERENCES users(id),
        FOREIGN KEY (doctor_id) REFERENCES doctors(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS prescriptions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        patient_id INTEGER NOT NULL,
        doctor_id INTEGER NOT NULL,
        appointment_id INTEGER,
        medicines TEXT NOT NULL DEFAULT '[]',
        diagnosis TEXT NOT NULL,
        notes TEXT NOT NULL DEFAULT '',
        status TEXT NOT NULL DEFAULT 'pending',
        dispensed_by INTEGER,
        dispensed_at TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY (patient_id) REFERENCES users(id),
        FOREIGN KEY (doctor_id) REFERENCES doctors(id),
        FOREIGN KEY (appointment_id) REFERENCES appointments(id) ON DELETE SET NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS notifications (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        title TEXT NOT NULL,
        message TEXT NOT NULL,
        type TEXT NOT NULL DEFAULT 'info',
        read INTEGER NOT NULL DEFAULT 0,
        related_model TEXT,
        related_id INTEGER,
        created_at TEXT NOT NULL,
        FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_stock_history_item ON lab_stock_history(item_id)",
    "CREATE INDEX IF NOT EXISTS idx_lab_tests_patient ON lab_tests(patient_id)",
    "CREATE INDEX IF NOT EXISTS idx_lab_tests_requested_by ON lab_tests(requested_by)",
    "CREATE INDEX IF NOT EXISTS idx_leave_requests_doctor ON leave_requests(doctor_id)",
    "CREATE INDEX IF NOT EXISTS idx_appointments_slot ON appointments(doctor_id, date, time)",
    "CREATE INDEX IF NOT EXISTS idx_prescriptions_status ON prescriptions(status)",
    "CREATE INDEX IF NOT EXISTS idx_notifications_user ON notifications(user_id, created_at)",
]


class Database:
    """
    SQLite database connection manager with concurrency optimizations.

    Features:
    - WAL mode for better concurrent read/write performance
    - Busy timeout to handle lock contention gracefully
    - Foreign key constraints enabled by default
    - Rows returned as sqlite3.Row (index and key access)

    Usage:
        # Via dependency injection (recommended):
        from core.dependencies import get_database
        db = get_database()

        # Direct instantiation (for testing):
        db = Database(db_path="/tmp/test.db")
    """

    def __init__(self, db_path: Optional[str] = None, busy_timeout: Optional[int] = None):
        """
        Initialize database connection.

        Args:
            db_path: Path to SQLite database file. Defaults to config DATABASE_PATH.
            busy_timeout: SQLite busy timeout in milliseconds. Defaults to config value.
        """
        self.db_path = db_path or DATABASE_PATH
        self.busy_timeout = busy_timeout if busy_timeout is not None else DATABASE_BUSY_TIMEOUT

        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self._init_db()

    def _configure_connection(self, conn: sqlite3.Connection) -> None:
        """Apply busy timeout, foreign keys and row factory to a connection."""
        conn.execute(f"PRAGMA busy_timeout = {self.busy_timeout}")
        conn.execute("PRAGMA foreign_keys = ON")
        conn.row_factory = sqlite3.Row

    def _init_db(self) -> None:
        """Create all tables (IF NOT EXISTS) and enable WAL mode."""
        conn = sqlite3.connect(self.db_path)
        self._configure_connection(conn)
        cursor = conn.cursor()

        # WAL mode persists in the database file, so this only needs to run once
        cursor.execute("PRAGMA journal_mode = WAL")
        result = cursor.fetchone()
        if result and result[0].lower() == 'wal':
            logger.info(f"SQLite WAL mode enabled for {self.db_path}")
        else:
            logger.warning(f"Failed to enable WAL mode, current mode: {result[0] if result else None}")

        for statement in SCHEMA:
            cursor.execute(statement)

        conn.commit()
        conn.close()

        logger.info(
            f"Database initialized: {self.db_path} "
            f"(busy_timeout={self.busy_timeout}ms)"
        )

    def get_connection(self) -> sqlite3.Connection:
        """
        Get a new database connection with concurrency settings.

        Returns:
            sqlite3.Connection: A new connection with foreign keys enabled,
                busy timeout set and sqlite3.Row as row factory.
        """
        conn = sqlite3.connect(self.db_path)
        self._configure_connection(conn)
        return conn

    def missing_tables(self) -> List[str]:
        """Names from TABLES that are absent from the database file."""
        conn = self.get_connection()
        try:
            rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
        finally:
            conn.close()
        present = {row["name"] for row in rows}
        return [name for name in TABLES if name not in present]


# =============================================================================
# ROW HELPERS
# =============================================================================
# Shared by repositories to turn sqlite3.Row objects into plain dicts.

def row_to_dict(
    row: Optional[sqlite3.Row],
    json_fields: Iterable[str] = (),
    bool_fields: Iterable[str] = (),
) -> Optional[Dict[str, Any]]:
    """
    Convert a row to a dict, decoding JSON text columns and 0/1 flags.

    Returns None for a missing row so callers can write
    ``return row_to_dict(cursor.fetchone())``.
    """
    if row is None:
        return None
    data = dict(row)
    for key in json_fields:
        raw = data.get(key)
        data[key] = json.loads(raw) if raw else None
    for key in bool_fields:
        if key in data:
            data[key] = bool(data[key])
    return data


def to_json(value: Any) -> Optional[str]:
    """Encode a list/dict for a JSON text column (None stays NULL)."""
    if value is None:
        return None
    return json.dumps(value)
