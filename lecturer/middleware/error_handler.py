"""
Last-resort exception handler: nothing escapes to the client as a traceback.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from loguru import logger

INTERNAL_ERROR_MESSAGE = "حدث خطأ غير متوقع، حاول مرة أخرى."


async def global_exception_handler(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception as exc:
        request_id = getattr(request.state, "request_id", None)
        logger.exception(
            f"Unhandled {type(exc).__name__} on {request.method} {request.url.path} [{request_id}]"
        )
        return JSONResponse(
            status_code=500,
            content={
                "detail": INTERNAL_ERROR_MESSAGE,
                "type": type(exc).__name__,
                "request_id": request_id,
            },
        )
