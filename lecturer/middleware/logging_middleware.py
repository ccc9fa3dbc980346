"""
Access logging for every request, tagged with a request id.
"""

import time
import uuid
from fastapi import Request
from loguru import logger

REQUEST_ID_HEADER = "X-Request-ID"


async def logging_middleware(request: Request, call_next):
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
    request.state.request_id = request_id
    client = request.client.host if request.client else "-"
    start = time.perf_counter()

    with logger.contextualize(request_id=request_id):
        logger.info(f"→ {request.method} {request.url.path} from {client} [{request_id}]")
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"← {request.method} {request.url.path} [{response.status_code}] {elapsed_ms:.2f}ms")

    response.headers[REQUEST_ID_HEADER] = request_id
    return response
