from fastapi import HTTPException

from coursehub.clients.query_client import QueryError


def raise_for_write_error(e: Exception) -> None:
    """Map a failed write to an HTTP error: 422 bad input, 404 missing row, 502 database."""
    if isinstance(e, ValueError):
        raise HTTPException(status_code=422, detail=str(e))
    if isinstance(e, QueryError) and e.code == "not_found":
        raise HTTPException(status_code=404, detail=e.message)
    raise HTTPException(status_code=502, detail=f"Database error: {e}")
