import uuid
import time
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
from framework.logging.logger import StructuredLogger

class LoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, logger: StructuredLogger):
        super().__init__(app)
        self.logger = logger

    async def dispatch(self, request: Request, call_next):
        trace_id = request.headers.get("X-Trace-ID") or uuid.uuid4().hex
        request.state.trace_id = trace_id

        with self.logger.contextualize(trace_id=trace_id):
            start_time = time.time()

            self.logger.info(
                f"Request Started | Method: {request.method} | Path: {request.url.path} | "
                f"Client: {request.client.host if request.client else 'unknown'}"
            )

            try:
                response = await call_next(request)
            except Exception as e:
                process_time = (time.time() - start_time) * 1000
                self.logger.error(
                    f"Request Failed | Error: {type(e).__name__} | Duration: {process_time:.2f}ms"
                )
                raise

            process_time = (time.time() - start_time) * 1000
            self.logger.info(
                f"Request Finished | Status: {response.status_code} | "
                f"Duration: {process_time:.2f}ms"
            )
            response.headers["X-Trace-ID"] = trace_id
            return response
