from typing import Annotated, Optional

from fastapi import APIRouter, Body, Depends, Path, Request, status

from app.services.staff.eligibility_credential_service import (
    EligibilityCredentialService,
    get_eligibility_credential_service,
)
from app.services.eligibility_service import (
    EligibilityService,
    get_eligibility_service,
)
from app.schemas.staff.eligibility_credential_schemas import (
    BatchProcessRequest,
    CredentialFailureResult,
    SendCredentialsRequest,
)
from app.schemas.staff.eligibility_schemas import UpdateEligibilityRequest
from app.utils.responses import ResponseBuilder
from app.utils.error_handlers import response_for_failure

students_router = APIRouter()

StudentId = Annotated[int, Path(gt=0, description="Student ID")]


def _result_response(request: Request, result):
    """Render a credential workflow result as an API response"""
    if isinstance(result, CredentialFailureResult):
        return response_for_failure(request, result.error_code, result.message)

    payload = result.model_dump(exclude={"message"})
    if not result.success:
        return ResponseBuilder.error(
            request=request,
            message=result.message,
            error_code="STUDENT_NOT_ELIGIBLE",
            status_code=status.HTTP_400_BAD_REQUEST,
            data=payload,
        )

    return ResponseBuilder.success(
        request=request,
        data=payload,
        message=result.message,
    )


@students_router.post(
    "/batch-send-credentials",
    response_model=None,
    status_code=status.HTTP_200_OK,
    summary="Send credentials to all eligible students",
    description="Process eligible students sequentially, skipping those whose account is already active.",
)
async def batch_send_credentials(
    request: Request,
    batch_request: Annotated[Optional[BatchProcessRequest], Body()] = None,
    credential_service: EligibilityCredentialService = Depends(
        get_eligibility_credential_service
    ),
):
    """Run credential distribution for a batch of eligible students"""
    batch_request = batch_request or BatchProcessRequest()
    result = await credential_service.batch_process(
        limit=batch_request.limit,
        skip_existing_users=batch_request.skip_existing_users,
    )

    return ResponseBuilder.success(
        request=request,
        data=result.model_dump(),
        message=(
            f"Batch processed {result.total_processed} students: "
            f"{result.credentials_sent} sent, {result.errors} errors"
        ),
    )


@students_router.post(
    "/{student_id}/send-credentials",
    response_model=None,
    status_code=status.HTTP_200_OK,
    summary="Send login credentials to a student",
    description="Reset the password of an eligible student's account, activate it and email the credentials.",
)
async def send_credentials(
    request: Request,
    student_id: StudentId,
    send_request: Annotated[Optional[SendCredentialsRequest], Body()] = None,
    credential_service: EligibilityCredentialService = Depends(
        get_eligibility_credential_service
    ),
):
    """Check eligibility and send credentials to one student"""
    send_request = send_request or SendCredentialsRequest()
    result = await credential_service.send_credentials(
        student_id, skip_password_reset=send_request.skip_password_reset
    )
    return _result_response(request, result)


@students_router.post(
    "/{student_id}/notify-eligibility",
    response_model=None,
    status_code=status.HTTP_200_OK,
    summary="Email a student their eligibility status",
)
async def notify_eligibility(
    request: Request,
    student_id: StudentId,
    credential_service: EligibilityCredentialService = Depends(
        get_eligibility_credential_service
    ),
):
    """Send the current eligibility status without changing any data"""
    result = await credential_service.notify_eligibility_status(student_id)
    return _result_response(request, result)


@students_router.get(
    "/{student_id}/eligibility",
    response_model=None,
    status_code=status.HTTP_200_OK,
    summary="Get the eligibility record of a student",
)
async def get_eligibility(
    request: Request,
    student_id: StudentId,
    eligibility_service: EligibilityService = Depends(get_eligibility_service),
):
    eligibility = await eligibility_service.get_eligibility(student_id)

    return ResponseBuilder.success(
        request=request,
        data=eligibility.model_dump(by_alias=True),
        message="Eligibility status retrieved successfully",
    )


@students_router.put(
    "/{student_id}/eligibility",
    response_model=None,
    status_code=status.HTTP_200_OK,
    summary="Create or update the eligibility record of a student",
    description="Checklist fields left out are kept; overall status is derived from the checklist when omitted.",
)
async def update_eligibility(
    request: Request,
    student_id: StudentId,
    eligibility_data: UpdateEligibilityRequest,
    eligibility_service: EligibilityService = Depends(get_eligibility_service),
):
    eligibility = await eligibility_service.update_eligibility(
        student_id, eligibility_data
    )

    return ResponseBuilder.success(
        request=request,
        data=eligibility.model_dump(by_alias=True),
        message="Eligibility status updated successfully",
    )
