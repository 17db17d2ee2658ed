import logging
import time

from sqlalchemy import event

from app.config import settings

logger = logging.getLogger(__name__)


class QueryCounter:
    """Running total of SQL statements executed on one engine."""

    def __init__(self) -> None:
        self.count: int = 0

    def reset(self) -> None:
        self.count = 0


def install_query_counter(engine, slow_query_ms: float | None = None) -> QueryCounter:
    """
    Register ``before_cursor_execute`` / ``after_cursor_execute`` listeners
    on *engine* and return the counter they increment.

    Every statement is counted, and statements that take longer than
    *slow_query_ms* (``settings.SLOW_QUERY_MS`` by default) are logged at
    WARNING with their SQL text.

    Must be called once per engine (production engine in ``database.py``,
    test engine in ``conftest.py``).
    """
    counter = QueryCounter()
    threshold = settings.SLOW_QUERY_MS if slow_query_ms is None else slow_query_ms
    sync_engine = engine.sync_engine

    @event.listens_for(sync_engine, "before_cursor_execute")
    def _start_timer(conn, cursor, statement, parameters, context, executemany):
        counter.count += 1
        conn.info.setdefault("query_start_time", []).append(time.perf_counter())

    @event.listens_for(sync_engine, "after_cursor_execute")
    def _log_slow_query(conn, cursor, statement, parameters, context, executemany):
        started = conn.info["query_start_time"].pop()
        elapsed_ms = (time.perf_counter() - started) * 1000
        if elapsed_ms >= threshold:
            logger.warning("Slow query (%.1f ms): %s", elapsed_ms, statement)

    return counter
