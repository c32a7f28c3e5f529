from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerateReportRequest(CamelModel):
    session_id: str | None = None
    payment_reference: str | None = Field(
        default=None,
        validation_alias=AliasChoices("paymentReference", "paymentIntentId", "payment_reference"),
    )


class UploadResponse(CamelModel):
    session_id: str
    screenshot_count: int
    category: str
    expires_in_seconds: int
    message: str


class DispatchResponse(CamelModel):
    job_id: str
    status: str = "processing"


class SessionStatusResponse(CamelModel):
    session_id: str
    category: str
    screenshot_count: int
    expires_in_seconds: int


class HealthResponse(CamelModel):
    status: str = "ok"
