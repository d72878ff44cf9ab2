"""
Common response models.

Error schema shared by all routers.

Dependencies: pydantic
System role: Common API response structures
"""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error response schema."""

    success: bool = False
    error: str = Field(description="Error message")
    details: dict | None = Field(default=None, description="Additional error context")


class AcceptedResponse(BaseModel):
    """Acknowledgement for work scheduled in the background."""

    lesson_id: str
    action: str
    status: str = "accepted"
