from fastapi import Request, status

from app.utils.responses import ResponseBuilder

# Error code to status code mapping for workflow failures
ERROR_STATUS_MAPPING = {
    "STUDENT_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "USER_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "ELIGIBILITY_STATUS_NOT_FOUND": status.HTTP_400_BAD_REQUEST,
    "STUDENT_EMAIL_NOT_FOUND": status.HTTP_400_BAD_REQUEST,
    "USER_ACCOUNT_NOT_FOUND": status.HTTP_400_BAD_REQUEST,
    "STUDENT_NOT_ELIGIBLE": status.HTTP_400_BAD_REQUEST,
    "EMAIL_DELIVERY_FAILED": status.HTTP_400_BAD_REQUEST,
}


def response_for_failure(request: Request, error_code: str, message: str):
    """Render a failed workflow result as an error envelope"""
    return ResponseBuilder.error(
        request=request,
        message=message,
        error_code=error_code,
        status_code=ERROR_STATUS_MAPPING.get(error_code, status.HTTP_400_BAD_REQUEST),
    )
