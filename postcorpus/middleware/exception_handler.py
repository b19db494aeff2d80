"""Exception handler for structured error responses."""

import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from ..exceptions import CorpusError, ErrorKind

logger = logging.getLogger(__name__)

# Kinds that point at the server, not the request.
_SERVER_SIDE = frozenset({ErrorKind.CORRUPT, ErrorKind.UNAVAILABLE})


async def corpus_exception_handler(request: Request, exc: CorpusError) -> JSONResponse:
    """
    Convert a CorpusError into its JSON body and status code.

    Client errors log at WARNING; corruption and storage outages at ERROR.
    Unavailable responses carry ``Retry-After`` since they are the only
    retryable kind.
    """
    log = logger.error if exc.kind in _SERVER_SIDE else logger.warning
    log(
        f"CorpusError: {exc.error_code.value}",
        extra={
            "error_code": exc.error_code.value,
            "kind": exc.kind.value,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
            "status_code": exc.status_code
        }
    )

    headers = {"Retry-After": "1"} if exc.kind == ErrorKind.UNAVAILABLE else None
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=headers,
    )
