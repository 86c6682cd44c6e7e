"""
analysis/store.py -- SQLAlchemy-backed persistence for diagnostic analyses.

Uses SQLAlchemy Core (not ORM) so the dataclass in analysis/models.py remains
the authoritative domain representation. Swapping SQLite for PostgreSQL is a
connection string change, not a rewrite.

Pattern: Repository + Data Mapper. AnalysisStore is the repository;
_row_to_analysis is the mapper. Route handlers never touch SQL directly.

Category counts:
  results.diagnosis is copied into the indexed `diagnosis` column on insert so
  the oncology / neurology counts run as REGEXP filters in the database
  instead of decoding every results blob. The patterns carry an inline (?i)
  flag, which both Python's re (SQLite) and PostgreSQL's ~ operator accept.

Usage:
    store = AnalysisStore()                               # SQLite default
    store = AnalysisStore("postgresql://user:pw@host/db") # PostgreSQL
    store.create_analysis(Analysis(patient_name="J. Doe", analysis_type="eeg",
                                   results={"diagnosis": "Seizure"}))
    counts = store.category_counts()
    store.close()
"""

import json
import logging
import re
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, func, select
from sqlalchemy.engine import Engine

from analysis.models import Analysis

logger = logging.getLogger("medai.analysis")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).parent / 'medai_analysis.db'}"

ONCOLOGY_PATTERN = r"(?i)Cancer|Benign|Malignant|Normal"
NEUROLOGY_PATTERN = r"(?i)Seizure|MS|Alzheimer|Control"

_TODAY_WINDOW = timedelta(hours=24)

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_analyses = Table(
    "analyses",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_email", String(255)),
    Column("patient_name", String(255), nullable=False),
    Column("analysis_type", String(100), nullable=False),
    Column("results", Text, nullable=False),  # JSON object serialized as text
    Column("diagnosis", String(255), index=True),  # copy of results["diagnosis"]
    Column("created_at", String(32), nullable=False, index=True),
)


# ---------------------------------------------------------------------------
# SQLite connection hooks
# ---------------------------------------------------------------------------


def _regexp(pattern: str, value: Optional[str]) -> bool:
    if value is None:
        return False
    return re.search(pattern, value) is not None


def _configure_sqlite(dbapi_conn, connection_record) -> None:
    """Enable WAL and install a REGEXP function on each new SQLite connection.

    SQLite parses the REGEXP operator but ships no implementation; `X REGEXP Y`
    calls regexp(Y, X). PRAGMAs and functions are per-connection.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")
    dbapi_conn.create_function("regexp", 2, _regexp)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _normalize_iso(value: str) -> str:
    """Return value as a UTC ISO 8601 string so string comparison orders by time.

    Naive timestamps are treated as UTC. Raises ValueError on malformed input.
    """
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class AnalysisStore:
    """Repository for Analysis records."""

    def __init__(self, db_url: str = _DEFAULT_DB_URL) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _configure_sqlite)
        metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_analysis(self, analysis: Analysis) -> int:
        """Insert an analysis and return its ID.

        created_at defaults to now; an explicit value (imports, backfills) is
        normalized to UTC first.
        """
        created_at = _normalize_iso(analysis.created_at) if analysis.created_at else _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(
                _analyses.insert().values(
                    user_email=analysis.user_email,
                    patient_name=analysis.patient_name,
                    analysis_type=analysis.analysis_type,
                    results=json.dumps(analysis.results),
                    diagnosis=analysis.diagnosis or None,
                    created_at=created_at,
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_recent(self, limit: Optional[int] = None) -> list[Analysis]:
        """Return analyses newest first. id breaks ties between equal timestamps."""
        query = _analyses.select().order_by(_analyses.c.created_at.desc(), _analyses.c.id.desc())
        if limit is not None:
            query = query.limit(limit)
        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_analysis(r) for r in rows]

    def count_all(self) -> int:
        with self.engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(_analyses)).scalar() or 0

    def count_since(self, since: datetime) -> int:
        """Count analyses created at or after `since` (timezone-aware)."""
        cutoff = since.astimezone(timezone.utc).isoformat()
        with self.engine.connect() as conn:
            return (
                conn.execute(
                    select(func.count()).select_from(_analyses).where(_analyses.c.created_at >= cutoff)
                ).scalar()
                or 0
            )

    def count_matching(self, pattern: str) -> int:
        """Count analyses whose diagnosis matches the regular expression."""
        with self.engine.connect() as conn:
            return (
                conn.execute(
                    select(func.count()).select_from(_analyses).where(_analyses.c.diagnosis.regexp_match(pattern))
                ).scalar()
                or 0
            )

    def category_counts(self, now: Optional[datetime] = None) -> dict[str, int]:
        """Return the dashboard counters.

        todayCount   -- analyses from the trailing 24 hours (not the calendar day)
        totalCount   -- every stored analysis
        cancerCount  -- diagnosis matches ONCOLOGY_PATTERN
        neuroCount   -- diagnosis matches NEUROLOGY_PATTERN

        The two categories are independent filters; a diagnosis can match both.
        """
        now = now or datetime.now(timezone.utc)
        return {
            "todayCount": self.count_since(now - _TODAY_WINDOW),
            "totalCount": self.count_all(),
            "cancerCount": self.count_matching(ONCOLOGY_PATTERN),
            "neuroCount": self.count_matching(NEUROLOGY_PATTERN),
        }

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_analysis(row) -> Analysis:
    try:
        results = json.loads(row.results) if row.results else {}
    except json.JSONDecodeError:
        logger.warning("Analysis %s has unreadable results JSON", row.id)
        results = {}
    return Analysis(
        id=row.id,
        user_email=row.user_email,
        patient_name=row.patient_name,
        analysis_type=row.analysis_type,
        results=results,
        created_at=row.created_at,
    )
