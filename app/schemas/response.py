from typing import List, Optional
from pydantic import BaseModel


class ErrorDetail(BaseModel):
    field: str
    kind: str
    message: str


class ErrorResponse(BaseModel):
    error: str
    code: str
    details: Optional[List[ErrorDetail]] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int
