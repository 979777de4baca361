"""Response envelope shared by every endpoint and by HttpLotStore.

    {"code": 0, "message": "success", "data": {...},
     "timestamp": "<ISO-8601 UTC>", "request_id": "req_..."}

code 0 is success; any other value is an AppError code and data is null.
request_id echoes the X-Request-ID header set by RequestLogMiddleware.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


def new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    request_id: str = Field(default_factory=new_request_id)

    @property
    def ok(self) -> bool:
        return self.code == 0


def success_response(data: Any = None, request_id: str | None = None) -> ApiResponse:
    if request_id is None:
        return ApiResponse(data=data)
    return ApiResponse(data=data, request_id=request_id)


def error_response(code: int, message: str, request_id: str | None = None) -> ApiResponse:
    if request_id is None:
        return ApiResponse(code=code, message=message)
    return ApiResponse(code=code, message=message, request_id=request_id)
