from typing import List, Optional
from datetime import datetime, date
from sqlalchemy import (
    String,
    Boolean,
    Integer,
    Text,
    ForeignKey,
    Enum,
    Index,
    func,
    DateTime,
    Date,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
import enum


class Base(DeclarativeBase):
    pass


# Enums
class UserRole(enum.Enum):
    ADMIN = "admin"
    PLACEMENT_EXECUTIVE = "placement_executive"
    TRAINER = "trainer"
    FACILITY_SUPERVISOR = "facility_supervisor"
    STAFF = "staff"
    STUDENT = "student"


class UserStatus(enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class StudentStatus(enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    INTERNSHIP_COMPLETED = "internship_completed"
    ELIGIBLE_FOR_CERTIFICATION = "eligible_for_certification"
    PLACEMENT_INITIATED = "placement_initiated"
    SELF_PLACEMENT_VERIFICATION_PENDING = "self_placement_verification_pending"
    SELF_PLACEMENT_APPROVED = "self_placement_approved"
    CERTIFIED = "certified"
    COMPLETED = "completed"
    GRADUATED = "graduated"
    WITHDRAWN = "withdrawn"


class ContactType(enum.Enum):
    MOBILE = "mobile"
    LANDLINE = "landline"
    WHATSAPP = "whatsapp"


class EligibilityOverallStatus(enum.Enum):
    ELIGIBLE = "eligible"
    NOT_ELIGIBLE = "not_eligible"
    PENDING = "pending"
    OVERRIDE = "override"


# Base model with common audit fields
class AuditMixin:
    """Mixin for common audit fields"""

    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )


# Models
class Student(Base, AuditMixin):
    __tablename__ = "students"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    dob: Mapped[Optional[date]] = mapped_column(Date)
    gender: Mapped[Optional[str]] = mapped_column(String(20))
    nationality: Mapped[Optional[str]] = mapped_column(String(50))
    student_type: Mapped[Optional[str]] = mapped_column(String(50))
    status: Mapped[StudentStatus] = mapped_column(
        Enum(StudentStatus), default=StudentStatus.ACTIVE, nullable=False
    )

    # Relationships
    contact_details: Mapped[List["ContactDetails"]] = relationship(
        back_populates="student",
        cascade="all, delete-orphan",
        order_by=lambda: (ContactDetails.is_primary.desc(), ContactDetails.id),
    )
    eligibility_statuses: Mapped[List["EligibilityStatus"]] = relationship(
        back_populates="student",
        cascade="all, delete-orphan",
        order_by=lambda: EligibilityStatus.id.desc(),
    )
    user: Mapped[Optional["User"]] = relationship(back_populates="student")

    # Constraints
    __table_args__ = (
        Index("idx_students_name", "first_name", "last_name"),
        Index("idx_students_status", "status"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def primary_email(self) -> Optional[str]:
        """First contact email that is not blank."""
        for contact in self.contact_details:
            if contact.email and contact.email.strip():
                return contact.email.strip()
        return None

    @property
    def current_eligibility(self) -> Optional["EligibilityStatus"]:
        """Most recent eligibility record, if any."""
        return self.eligibility_statuses[0] if self.eligibility_statuses else None


class ContactDetails(Base):
    __tablename__ = "contact_details"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"), nullable=False
    )
    primary_mobile: Mapped[Optional[str]] = mapped_column(String(20))
    email: Mapped[Optional[str]] = mapped_column(String(150), unique=True)
    emergency_contact: Mapped[Optional[str]] = mapped_column(String(20))
    contact_type: Mapped[ContactType] = mapped_column(
        Enum(ContactType), default=ContactType.MOBILE, nullable=False
    )
    is_primary: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    verified_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    # Relationships
    student: Mapped["Student"] = relationship(back_populates="contact_details")

    # Constraints
    __table_args__ = (Index("idx_contact_details_student_id", "student_id"),)


class EligibilityStatus(Base, AuditMixin):
    __tablename__ = "eligibility_status"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"), nullable=False
    )
    classes_completed: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    fees_paid: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    assignments_submitted: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    documents_submitted: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    trainer_consent: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    override_requested: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    manual_override: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    manual_handling: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    requested_by: Mapped[Optional[str]] = mapped_column(String(100))
    reason: Mapped[Optional[str]] = mapped_column(String(255))
    comments: Mapped[Optional[str]] = mapped_column(Text)
    overall_status: Mapped[EligibilityOverallStatus] = mapped_column(
        Enum(EligibilityOverallStatus),
        default=EligibilityOverallStatus.NOT_ELIGIBLE,
        nullable=False,
    )

    # Relationships
    student: Mapped["Student"] = relationship(back_populates="eligibility_statuses")

    # Constraints
    __table_args__ = (
        Index("idx_eligibility_status_student_id", "student_id"),
        Index("idx_eligibility_status_overall", "overall_status"),
    )

    def is_complete(self) -> bool:
        return (
            self.classes_completed
            and self.fees_paid
            and self.assignments_submitted
            and self.documents_submitted
            and self.trainer_consent
        )

    def needs_override(self) -> bool:
        return self.override_requested and not self.is_complete()


class User(Base, AuditMixin):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    login_id: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole), default=UserRole.STUDENT, nullable=False
    )
    status: Mapped[UserStatus] = mapped_column(
        Enum(UserStatus), default=UserStatus.INACTIVE, nullable=False
    )
    student_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("students.id", ondelete="SET NULL"), unique=True
    )
    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime)

    # Relationships
    student: Mapped[Optional["Student"]] = relationship(back_populates="user")
    password_resets: Mapped[List["PasswordReset"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )

    # Constraints
    __table_args__ = (
        Index("idx_users_role_status", "role", "status"),
        Index("idx_users_student_id", "student_id"),
    )

    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE


class PasswordReset(Base):
    __tablename__ = "password_resets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    otp: Mapped[str] = mapped_column(String(10), nullable=False)
    # Stored as naive UTC
    expiry: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )

    # Relationships
    user: Mapped["User"] = relationship(back_populates="password_resets")

    # Constraints
    __table_args__ = (
        Index("idx_password_resets_user_id", "user_id"),
        Index("idx_password_resets_expiry", "expiry"),
    )

    def is_expired(self, now: datetime) -> bool:
        return now > self.expiry

    def is_valid(self, otp: str, now: datetime) -> bool:
        return not self.is_expired(now) and self.otp == otp
