from typing import Any, Optional
from pydantic import BaseModel

class ResponseModel(BaseModel):
    code: int = 200
    message: str = "success"
    data: Optional[Any] = None

    @staticmethod
    def success(data: Any = None, code: int = 200):
        return {"code": code, "message": "success", "data": data}

    @staticmethod
    def fail(code: int = 400, message: str = "error", data: Any = None):
        return {"code": code, "message": message, "data": data}


class ErrorEnvelope(BaseModel):
    """External shape of an unanticipated failure."""
    status: int = 500
    title: str = "Internal Server Error"
    detail: Optional[str] = None

    def to_content(self) -> dict:
        return self.model_dump(exclude_none=True)
