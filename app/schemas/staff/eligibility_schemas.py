from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.db.models import EligibilityOverallStatus


class UpdateEligibilityRequest(BaseModel):
    """Request schema for creating or updating a student's eligibility record"""

    classes_completed: Optional[bool] = None
    fees_paid: Optional[bool] = None
    assignments_submitted: Optional[bool] = None
    documents_submitted: Optional[bool] = None
    trainer_consent: Optional[bool] = None
    override_requested: Optional[bool] = None
    manual_override: Optional[bool] = None
    manual_handling: Optional[bool] = None
    requested_by: Optional[str] = Field(None, max_length=100)
    reason: Optional[str] = Field(None, max_length=255)
    comments: Optional[str] = None
    overall_status: Optional[EligibilityOverallStatus] = Field(
        None, description="Derived from the checklist when omitted"
    )


class EligibilityResponse(BaseModel):
    """Response schema for an eligibility record"""

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: int
    student_id: int
    classes_completed: bool
    fees_paid: bool
    assignments_submitted: bool
    documents_submitted: bool
    trainer_consent: bool
    override_requested: bool
    manual_override: bool
    manual_handling: bool
    requested_by: Optional[str] = None
    reason: Optional[str] = None
    comments: Optional[str] = None
    overall_status: EligibilityOverallStatus
    checklist_complete: bool = False
    updated_at: Optional[datetime] = None
