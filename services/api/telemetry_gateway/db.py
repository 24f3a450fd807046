import logging
from dataclasses import asdict
from typing import List, Optional

from psycopg_pool import ConnectionPool

from . import config
from .ingest import AcceptedRow, MetricsRow, RejectedRow
from .registry import SignalRegistry

log = logging.getLogger("db")

pool = ConnectionPool(
    config.DATABASE_URL,
    min_size=config.DB_POOL_MIN_SIZE,
    max_size=config.DB_POOL_MAX_SIZE,
    timeout=config.DB_POOL_TIMEOUT,
    open=False,
)


def ensure_schema(path=None):
    path = path or config.SCHEMA_SQL_PATH
    if not path.exists():
        log.warning(f"schema file not found: {path}")
        return
    ddl = path.read_text(encoding="utf-8")
    with pool.connection() as conn:
        with conn.cursor() as cur:
            cur.execute(ddl)
        conn.commit()


def ping() -> bool:
    try:
        with pool.connection() as conn:
            conn.execute("SELECT 1").fetchone()
        return True
    except Exception:
        log.warning("Database ping failed", exc_info=True)
        return False


def load_signal_registry() -> SignalRegistry:
    with pool.connection() as conn:
        with conn.cursor() as cur:
            cur.execute("SELECT signal_name, signal_type FROM signal_register_table")
            rows = cur.fetchall()
    return SignalRegistry.from_rows(rows)


class PostgresStore:
    """TelemetryStore backed by the shared connection pool."""

    def __init__(self, pool: ConnectionPool):
        self.pool = pool

    def vessel_is_active(self, vessel_id: str) -> bool:
        with self.pool.connection() as conn:
            row: Optional[tuple] = conn.execute(
                "SELECT EXISTS(SELECT 1 FROM vessel_register_table WHERE vessel_id = %s AND is_active = TRUE)",
                (vessel_id,),
            ).fetchone()
        return bool(row and row[0])

    def write_signals(self, accepted: List[AcceptedRow], rejected: List[RejectedRow]) -> None:
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                if accepted:
                    cur.executemany(
                        '''
                        INSERT INTO main_raw (vessel_id, timestamp_utc, signal_name, signal_value)
                        VALUES (%(vessel_id)s, %(timestamp)s, %(signal_name)s, %(value)s)
                        ''',
                        [asdict(r) for r in accepted],
                    )
                if rejected:
                    cur.executemany(
                        '''
                        INSERT INTO filtered_raw (vessel_id, timestamp_utc, signal_name, signal_value, reason)
                        VALUES (%(vessel_id)s, %(timestamp)s, %(signal_name)s, %(value)s, %(reason)s)
                        ''',
                        [asdict(r) for r in rejected],
                    )
            conn.commit()

    def write_metrics(self, row: MetricsRow) -> None:
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    '''
                    INSERT INTO server_metrics (vessel_id, validation_ms, ingestion_ms, total_ms)
                    VALUES (%(vessel_id)s, %(validation_ms)s, %(ingestion_ms)s, %(total_ms)s)
                    ''',
                    asdict(row),
                )
            conn.commit()
