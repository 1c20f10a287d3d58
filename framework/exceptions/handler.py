from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from framework.logging.logger import LogLevel, StructuredLogger
from framework.repository.exceptions import PersistenceError
from framework.response import ErrorEnvelope

GENERIC_DETAIL = "An unexpected error occurred. Please try again later."


class UnanticipatedError(Exception):
    """A failure nobody in the request pipeline handled."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    title = "Internal Server Error"

    def __init__(self, cause: BaseException):
        super().__init__(f"{type(cause).__name__}: {cause}")
        self.cause = cause

    @property
    def is_store_failure(self) -> bool:
        return isinstance(self.cause, (SQLAlchemyError, PersistenceError))

    def envelope(self) -> ErrorEnvelope:
        # Never carries the cause's text outward.
        return ErrorEnvelope(status=self.status_code, title=self.title, detail=GENERIC_DETAIL)


def create_exception_handler(app_logger: StructuredLogger):
    """Build the last-resort handler bound to the application logger."""

    async def global_exception_handler(request: Request, exc: Exception):
        """Log the failure and answer with the fixed error envelope."""
        trace_id = getattr(request.state, "trace_id", "unknown")
        failure = exc if isinstance(exc, UnanticipatedError) else UnanticipatedError(exc)

        if failure.is_store_failure:
            app_logger.exception(
                f"Trace[{trace_id}] - DatabaseError: {failure}",
                exc=exc,
                level=LogLevel.CRITICAL,
                trace_id=trace_id,
            )
        else:
            app_logger.exception(
                f"Trace[{trace_id}] - UncaughtException: {failure}", exc=exc, trace_id=trace_id
            )

        return JSONResponse(
            status_code=failure.status_code,
            content=failure.envelope().to_content(),
            headers={"X-Trace-ID": trace_id},
        )

    return global_exception_handler


def install_exception_handlers(app: FastAPI, app_logger: StructuredLogger) -> None:
    app.add_exception_handler(Exception, create_exception_handler(app_logger))
