from typing import Optional, Any, Literal
from pydantic import BaseModel, Field


class Meta(BaseModel):
    message: str = Field(..., description="Descriptive message for response")
    status: Literal["success", "error"] = Field(..., examples=["success", "error"])
    code: int = Field(..., description="HTTP status code")


class StandardResponse(BaseModel):
    data: Optional[Any] = Field(None, description="Payload or result")
    meta: Meta = Field(..., description="Standard metadata with status, message, and code")

    @classmethod
    def success(
        cls,
        data: Optional[Any] = None,
        message: str = "Success",
        code: int = 200
    ) -> "StandardResponse":
        return cls(
            data=data,
            meta=Meta(
                message=message,
                status="success",
                code=code
            )
        )

    @classmethod
    def from_result(cls, result: dict, code: int = 200) -> "StandardResponse":
        """Wrap a service result, lifting its message into meta."""
        payload = {k: v for k, v in result.items() if k != "message"}
        return cls.success(data=payload or None, message=result.get("message", "Success"), code=code)
