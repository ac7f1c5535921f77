from fastapi import APIRouter, Depends, Request

from app.services.password_reset_service import (
    PasswordResetService,
    get_password_reset_service,
)
from app.schemas.auth_schemas import (
    PasswordResetRequest,
    VerifyOtpRequest,
    ResetPasswordRequest,
)
from app.utils.responses import ResponseBuilder

auth_router = APIRouter()


@auth_router.post("/password-reset/request")
async def request_password_reset(
    reset_request: PasswordResetRequest,
    request: Request,
    reset_service: PasswordResetService = Depends(get_password_reset_service),
):
    """
    Issue a one-time password for resetting the password of an active account.

    The OTP is emailed to the login ID; outside production it is also echoed
    in the response.
    """
    result = await reset_service.request_password_reset(reset_request.login_id)

    return ResponseBuilder.success(
        request=request,
        data=result.model_dump(by_alias=True, exclude_none=True),
        message="Password reset OTP sent",
    )


@auth_router.post("/password-reset/verify")
async def verify_password_reset_otp(
    verify_request: VerifyOtpRequest,
    request: Request,
    reset_service: PasswordResetService = Depends(get_password_reset_service),
):
    """Check an OTP without consuming it"""
    await reset_service.verify_otp(verify_request.login_id, verify_request.otp)

    return ResponseBuilder.success(
        request=request,
        data={"valid": True},
        message="OTP verified",
    )


@auth_router.post("/password-reset/reset")
async def reset_password(
    reset_request: ResetPasswordRequest,
    request: Request,
    reset_service: PasswordResetService = Depends(get_password_reset_service),
):
    """Set a new password using a valid OTP"""
    await reset_service.reset_password(
        reset_request.login_id, reset_request.otp, reset_request.new_password
    )

    return ResponseBuilder.success(
        request=request,
        message="Password has been reset successfully",
    )
