import logging

from coursehub.clients.query_client import Query
from coursehub.models import QueryResult

logger = logging.getLogger(__name__)


async def read(query: Query, label: str) -> QueryResult:
    """Execute *query*, turning any failure into an empty, failed result.

    This is the only place read errors are caught. Connection, SQL and
    driver errors are all logged with their traceback and reported
    through ``QueryResult.error``; they never reach the caller.
    """
    try:
        rows = await query.execute()
    except Exception as e:
        logger.exception("%s failed on %s", label, query.table)
        return QueryResult.failure(query.table, e)
    return QueryResult(rows=rows, source=query.table)
