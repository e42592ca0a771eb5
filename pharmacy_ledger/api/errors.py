"""
Translate ledger errors into HTTP responses.
"""

from fastapi import HTTPException

from pharmacy_ledger.exceptions import LedgerError


def to_http_exception(error: LedgerError) -> HTTPException:
    """Build the HTTPException for a ledger error, keeping its code."""
    return HTTPException(
        status_code=error.status_code,
        detail={"code": error.code, "message": str(error)},
    )
