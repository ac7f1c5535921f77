from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class SendCredentialsRequest(BaseModel):
    """Request schema for sending credentials to a single student"""

    skip_password_reset: bool = Field(
        default=False,
        description="Notify the student without generating a new password",
    )


class BatchProcessRequest(BaseModel):
    """Request schema for batch credential distribution"""

    limit: int = Field(default=100, gt=0, le=1000, description="Maximum students")
    skip_existing_users: bool = Field(
        default=True,
        description="Skip students whose account is already active",
    )


class NotEligibleData(BaseModel):
    student_id: int
    overall_status: str
    email_sent: bool


class NotificationSentData(BaseModel):
    student_id: int
    email: str
    overall_status: str
    email_sent: bool
    user_id: Optional[int] = None


class CredentialsSentData(BaseModel):
    student_id: int
    user_id: int
    login_id: str
    email: str
    user_status: str
    student_status: str
    password_reset: bool = True
    email_sent: bool


class NotEligibleResult(BaseModel):
    """Student is not eligible; a status email may have been sent, nothing written"""

    kind: Literal["not_eligible"] = "not_eligible"
    success: Literal[False] = False
    message: str
    data: NotEligibleData


class NotificationSentResult(BaseModel):
    """Status email sent without touching the stored account"""

    kind: Literal["notification_sent"] = "notification_sent"
    success: Literal[True] = True
    message: str
    data: NotificationSentData


class CredentialsSentResult(BaseModel):
    """Account activated with a new password; email delivery in data.email_sent"""

    kind: Literal["credentials_sent"] = "credentials_sent"
    success: Literal[True] = True
    message: str
    data: CredentialsSentData


class CredentialFailureResult(BaseModel):
    """Validation or lookup failure reported without raising"""

    kind: Literal["failed"] = "failed"
    success: Literal[False] = False
    message: str
    error_code: str


CredentialResult = Annotated[
    Union[
        NotEligibleResult,
        NotificationSentResult,
        CredentialsSentResult,
        CredentialFailureResult,
    ],
    Field(discriminator="kind"),
]


class BatchItemDetail(BaseModel):
    student_id: int
    student_name: str
    status: Literal[
        "credentials_sent",
        "notification_sent",
        "already_has_account",
        "not_eligible",
        "failed",
        "error",
    ]
    message: str
    email_sent: Optional[bool] = None


class BatchProcessResult(BaseModel):
    """Counters and per-student details of a batch run"""

    total_processed: int = 0
    credentials_sent: int = 0
    already_have_accounts: int = 0
    not_eligible: int = 0
    errors: int = 0
    cancelled: bool = False
    details: List[BatchItemDetail] = Field(default_factory=list)
