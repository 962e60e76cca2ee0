from pydantic import BaseModel, ConfigDict


class ValidationIssueOut(BaseModel):
    field: str
    message: str
    type: str | None = None


class ErrorOut(BaseModel):
    error: str
    code: str
    request_id: str
    path: str
    details: list[ValidationIssueOut] | None = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "Salon non trouvé",
                "code": "not_found",
                "request_id": "8d8f2b00-6c79-4a45-8ff4-b0a5f2bc4bc2",
                "path": "/api/salons/unknown",
            }
        }
    )


class MessageOut(BaseModel):
    message: str
