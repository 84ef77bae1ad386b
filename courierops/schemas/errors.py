"""Error response schema shared by all endpoints."""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """Standard error response schema.

    Used for all domain error responses (400, 404, 409).
    """

    error: str = Field(
        ...,
        description="Error type identifier",
        examples=["not_found", "validation_error", "invalid_transition"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Invalid status transition from submitted to approved"],
    )
    details: Optional[dict] = Field(
        None,
        description="Additional error context (current/target status, missing fields, etc.)",
        examples=[{"current_status": "submitted", "target_status": "approved"}],
    )

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "error": "not_found",
                    "message": "Corporate application not found: CORP-20260101-00000000",
                },
                {
                    "error": "invalid_transition",
                    "message": "Invalid status transition from submitted to approved",
                    "details": {
                        "current_status": "submitted",
                        "target_status": "approved",
                        "allowed_transitions": [
                            "documents_required",
                            "kyb_in_progress",
                            "under_review",
                            "rejected",
                            "cancelled",
                        ],
                    },
                },
                {
                    "error": "validation_error",
                    "message": "Required fields are missing: Business name",
                    "details": {"missing_fields": {"business_name": "Business name is required"}},
                },
            ]
        }
    )
