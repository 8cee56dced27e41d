# search_catalog.py - Lists the EXACT searches whose progress images are maintained
from __future__ import annotations
import time
from typing import Iterator, Optional

from db_utils import iter_rows
from logging_config import get_logger, get_metrics_logger

logger = get_logger("search_catalog")
metrics = get_metrics_logger("search_catalog")

SEARCH_TABLE = "exact_search"
SEARCH_NAMES_QUERY = f"SELECT search_name FROM {SEARCH_TABLE}"


class SearchCatalog:
    """Read-only view of the search table.

    Order is whatever the database returns; callers must not rely on it.
    """

    def __init__(self, dsn: Optional[str] = None, fetch_size: int = 500,
                 connect_timeout: Optional[int] = None):
        self.dsn = dsn
        self.fetch_size = fetch_size
        self.connect_timeout = connect_timeout

    def query_identifiers(self) -> Iterator[str]:
        """Yield search names lazily.

        Raises DatabaseConnectionError or QueryError on the first advance
        if the database is unreachable or the query fails.
        """
        start = time.monotonic()
        count = 0
        rows = iter_rows(SEARCH_NAMES_QUERY, dsn=self.dsn, fetch_size=self.fetch_size,
                         connect_timeout=self.connect_timeout)
        for (search_name,) in rows:
            if search_name is None:
                logger.warning("search_name_null_skipped", table=SEARCH_TABLE)
                continue
            count += 1
            yield search_name

        metrics.database_operation(
            operation="select",
            table=SEARCH_TABLE,
            duration_ms=round((time.monotonic() - start) * 1000, 2),
            rows_affected=count,
        )
