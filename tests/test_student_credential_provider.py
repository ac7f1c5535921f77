import pytest

from app.db.models import (
    ContactDetails,
    EligibilityOverallStatus,
    EligibilityStatus,
    Student,
    StudentStatus,
    UserStatus,
)
from app.providers.student_credential_provider import StudentCredentialProvider
from app.utils.errors import DatabaseError

from conftest import create_student, reload_student


@pytest.fixture
def provider(db_session) -> StudentCredentialProvider:
    return StudentCredentialProvider(db_session)


class TestStudentLookups:
    def test_student_with_relations(self, provider, db_session, student_eligible):
        student = provider.find_student_with_relations(8)

        assert student.primary_email == "a@b.com"
        assert student.current_eligibility.overall_status == EligibilityOverallStatus.ELIGIBLE

    def test_unknown_student(self, provider):
        assert provider.find_student_with_relations(999) is None

    def test_primary_email_skips_blank_contacts(self, provider, db_session):
        student = Student(id=1, first_name="Blank", last_name="Email")
        student.contact_details.extend(
            [
                ContactDetails(email="   ", is_primary=True),
                ContactDetails(email="second@example.com", is_primary=False),
            ]
        )
        db_session.add(student)
        db_session.commit()

        assert provider.find_student_with_relations(1).primary_email == "second@example.com"

    def test_user_by_student_id(self, provider, student_eligible):
        assert provider.find_user_by_student_id(8).id == 50
        assert provider.find_user_by_student_id(8, lock=True).id == 50
        assert provider.find_user_by_student_id(999) is None

    def test_users_by_student_ids(self, provider, db_session):
        create_student(db_session, 1, user_id=10)
        create_student(db_session, 2)
        create_student(db_session, 3, user_id=30)

        users = provider.find_users_by_student_ids([1, 2, 3])

        assert sorted(users) == [1, 3]
        assert users[3].id == 30
        assert provider.find_users_by_student_ids([]) == {}


class TestFindEligibleStudents:
    def test_uses_newest_record_only(self, provider, db_session):
        create_student(db_session, 1, EligibilityOverallStatus.NOT_ELIGIBLE)
        db_session.add(
            EligibilityStatus(student_id=1, overall_status=EligibilityOverallStatus.ELIGIBLE)
        )
        create_student(db_session, 2, EligibilityOverallStatus.ELIGIBLE)
        db_session.add(
            EligibilityStatus(student_id=2, overall_status=EligibilityOverallStatus.PENDING)
        )
        db_session.commit()

        assert [s.id for s in provider.find_eligible_students(10)] == [1]

    def test_limit_and_order(self, provider, db_session):
        for student_id in (5, 3, 4):
            create_student(db_session, student_id, EligibilityOverallStatus.OVERRIDE)

        assert [s.id for s in provider.find_eligible_students(2)] == [3, 4]

    def test_inactive_students_excluded(self, provider, db_session):
        create_student(
            db_session, 1, student_status=StudentStatus.PLACEMENT_INITIATED
        )

        assert provider.find_eligible_students(10) == []


class TestUnitOfWork:
    def test_commits_all_writes(self, provider, db_session, student_eligible):
        student = provider.find_student_with_relations(8)
        user = provider.find_user_by_student_id(8)

        with provider.unit_of_work():
            user.status = UserStatus.ACTIVE
            student.status = StudentStatus.PLACEMENT_INITIATED
            provider.save_user(user)
            provider.save_student(student)

        assert reload_student(db_session, 8).status == StudentStatus.PLACEMENT_INITIATED
        assert provider.find_user_by_student_id(8).status == UserStatus.ACTIVE

    def test_rolls_back_both_writes(self, provider, db_session, student_eligible):
        student = provider.find_student_with_relations(8)
        user = provider.find_user_by_student_id(8)

        with pytest.raises(RuntimeError):
            with provider.unit_of_work():
                user.status = UserStatus.ACTIVE
                provider.save_user(user)
                student.status = StudentStatus.PLACEMENT_INITIATED
                provider.save_student(student)
                raise RuntimeError("crash between writes")

        assert reload_student(db_session, 8).status == StudentStatus.ACTIVE
        assert provider.find_user_by_student_id(8).status == UserStatus.INACTIVE

    def test_database_failure_is_wrapped(self, provider, db_session, student_eligible):
        create_student(db_session, 11, user_id=110)
        user = provider.find_user_by_student_id(11)

        with pytest.raises(DatabaseError) as exc_info:
            with provider.unit_of_work():
                user.login_id = "a@b.com"
                provider.save_user(user)
        assert exc_info.value.error_code == "CREDENTIAL_UPDATE_FAILED"

        assert provider.find_user_by_student_id(11).login_id == "student11@example.com"
