from typing import Optional

from pydantic import Field
from .camel_base_model import CamelCaseBaseModel as BaseModel


class PasswordResetRequest(BaseModel):
    """Request an OTP for resetting a password"""

    login_id: str = Field(..., min_length=1, description="Login ID (email)")


class VerifyOtpRequest(BaseModel):
    """Verify a password reset OTP"""

    login_id: str = Field(..., min_length=1, description="Login ID (email)")
    otp: str = Field(..., min_length=6, max_length=6, description="6-digit OTP")


class ResetPasswordRequest(BaseModel):
    """Set a new password using a valid OTP"""

    login_id: str = Field(..., min_length=1, description="Login ID (email)")
    otp: str = Field(..., min_length=6, max_length=6, description="6-digit OTP")
    new_password: str = Field(..., min_length=1, description="New password")


class PasswordResetRequestResponse(BaseModel):
    login_id: str = Field(..., description="Login ID the OTP was issued for")
    expires_in_minutes: int = Field(..., description="OTP validity window")
    email_sent: bool = Field(..., description="Whether the OTP email was delivered")
    otp: Optional[str] = Field(None, description="Echoed outside production only")
