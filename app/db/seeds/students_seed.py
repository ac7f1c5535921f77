from datetime import date

from sqlalchemy.orm import Session
from sqlalchemy import delete

from app.db.models import (
    User,
    Student,
    ContactDetails,
    EligibilityStatus,
    PasswordReset,
    UserRole,
    UserStatus,
    StudentStatus,
    EligibilityOverallStatus,
)
from app.utils.passwords import generate_temporary_password, hash_password
from app.utils.logging import get_logger

logger = get_logger()


def seed_students(db_session: Session):
    """Sync version: Seed students with contact details, eligibility and login accounts - clear existing and add new"""

    # Clear existing data, children first
    db_session.execute(delete(PasswordReset))
    db_session.execute(delete(User))
    db_session.execute(delete(EligibilityStatus))
    db_session.execute(delete(ContactDetails))
    db_session.execute(delete(Student))
    db_session.commit()

    # (first name, last name, email, overall status, checklist complete)
    students_data = [
        ("Aarav", "Sharma", "aarav.sharma@example.com", EligibilityOverallStatus.ELIGIBLE, True),
        ("Mei", "Lin", "mei.lin@example.com", EligibilityOverallStatus.NOT_ELIGIBLE, False),
        ("Tomas", "Novak", "tomas.novak@example.com", EligibilityOverallStatus.PENDING, False),
        ("Grace", "Okafor", "grace.okafor@example.com", EligibilityOverallStatus.OVERRIDE, False),
        ("Liam", "Walsh", "liam.walsh@example.com", EligibilityOverallStatus.ELIGIBLE, True),
    ]

    for first_name, last_name, email, overall_status, complete in students_data:
        student = Student(
            first_name=first_name,
            last_name=last_name,
            dob=date(2000, 1, 1),
            student_type="international",
            status=StudentStatus.ACTIVE,
        )
        student.contact_details.append(ContactDetails(email=email, is_primary=True))
        student.eligibility_statuses.append(
            EligibilityStatus(
                classes_completed=complete,
                fees_paid=complete,
                assignments_submitted=complete,
                documents_submitted=complete,
                trainer_consent=complete,
                override_requested=overall_status == EligibilityOverallStatus.OVERRIDE,
                manual_override=overall_status == EligibilityOverallStatus.OVERRIDE,
                reason=(
                    "Approved by placement coordinator"
                    if overall_status == EligibilityOverallStatus.OVERRIDE
                    else None
                ),
                overall_status=overall_status,
            )
        )
        # Accounts are created with the student and stay inactive until credentials are sent
        student.user = User(
            login_id=email,
            password=hash_password(generate_temporary_password()),
            role=UserRole.STUDENT,
            status=UserStatus.INACTIVE,
        )
        db_session.add(student)

    db_session.commit()
    logger.info(f"Seeded {len(students_data)} students with login accounts")
