from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from app.config.settings import settings
from app.db.models import EligibilityOverallStatus, StudentStatus, UserStatus
from app.db.session import get_sync_session
from app.main import create_application
from app.services.email_service import get_email_notifier

from conftest import create_student, reload_student, reload_user

API = settings.API_PREFIX


@pytest.fixture
def client(db_session, notifier):
    application = create_application()

    def override_session():
        yield db_session

    application.dependency_overrides[get_sync_session] = override_session
    application.dependency_overrides[get_email_notifier] = lambda: notifier

    with TestClient(application) as test_client:
        yield test_client


class TestStartup:
    @pytest.mark.parametrize("enabled, expected_calls", [(True, 1), (False, 0)])
    def test_email_connection_checked_on_startup(
        self, monkeypatch, enabled, expected_calls
    ):
        monkeypatch.setattr(settings, "VERIFY_EMAIL_ON_STARTUP", enabled)

        with patch(
            "app.main.SmtpEmailNotifier.verify_connection",
            new=AsyncMock(return_value=False),
        ) as verify_connection:
            with TestClient(create_application()) as test_client:
                response = test_client.get(f"{API}/shared/health/")

        assert response.status_code == 200
        assert verify_connection.await_count == expected_calls


class TestHealth:
    def test_health_check(self, client):
        response = client.get(f"{API}/shared/health/")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["status"] == "healthy"

    def test_request_id_is_echoed(self, client):
        request_id = "0b7e2d7c-5c1e-4d55-9d4b-2d9a4c3f7a10"

        response = client.get(
            f"{API}/shared/health/", headers={"X-Request-ID": request_id}
        )

        assert response.headers["X-Request-ID"] == request_id
        assert response.json()["request_id"] == request_id

    def test_security_headers(self, client):
        response = client.get(f"{API}/shared/health/")
        assert response.headers["X-Content-Type-Options"] == "nosniff"


class TestStudentCredentialRoutes:
    def test_send_credentials_success(self, client, db_session, student_eligible):
        response = client.post(f"{API}/staff/students/8/send-credentials")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["kind"] == "credentials_sent"
        assert body["data"]["data"]["user_id"] == 50
        assert reload_user(db_session, 50).status == UserStatus.ACTIVE
        assert reload_student(db_session, 8).status == StudentStatus.PLACEMENT_INITIATED

    def test_send_credentials_not_eligible(self, client, student_not_eligible):
        response = client.post(f"{API}/staff/students/7/send-credentials")

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert "not eligible" in body["message"]
        assert body["meta"]["error_code"] == "STUDENT_NOT_ELIGIBLE"
        assert body["data"]["data"]["overall_status"] == "not_eligible"

    def test_send_credentials_unknown_student(self, client):
        response = client.post(f"{API}/staff/students/999/send-credentials")

        assert response.status_code == 404
        assert response.json()["meta"]["error_code"] == "STUDENT_NOT_FOUND"

    def test_send_credentials_without_account(self, client, student_without_account):
        response = client.post(f"{API}/staff/students/9/send-credentials")

        assert response.status_code == 400
        assert response.json()["meta"]["error_code"] == "USER_ACCOUNT_NOT_FOUND"

    def test_send_credentials_skip_password_reset(
        self, client, db_session, notifier, student_eligible
    ):
        response = client.post(
            f"{API}/staff/students/8/send-credentials",
            json={"skip_password_reset": True},
        )

        assert response.status_code == 200
        assert response.json()["data"]["kind"] == "notification_sent"
        assert reload_user(db_session, 50).status == UserStatus.INACTIVE
        assert notifier.calls_to("send_login_credentials") == []

    def test_invalid_student_id(self, client):
        response = client.post(f"{API}/staff/students/0/send-credentials")

        assert response.status_code == 422
        assert response.json()["meta"]["error_code"] == "VALIDATION_ERROR"

    def test_notify_eligibility_without_email(
        self, client, notifier, student_without_email
    ):
        response = client.post(f"{API}/staff/students/10/notify-eligibility")

        assert response.status_code == 400
        assert "email not found" in response.json()["message"].lower()
        assert notifier.calls == []

    def test_batch_send_credentials(self, client, db_session):
        for student_id in (20, 21, 22):
            create_student(db_session, student_id, user_id=student_id * 10)

        response = client.post(
            f"{API}/staff/students/batch-send-credentials", json={"limit": 2}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total_processed"] == 2
        assert data["credentials_sent"] == 2
        assert len(data["details"]) == 2

    def test_batch_send_credentials_without_body(self, client, db_session):
        create_student(db_session, 23, user_id=230, user_status=UserStatus.ACTIVE)

        response = client.post(f"{API}/staff/students/batch-send-credentials")

        assert response.status_code == 200
        assert response.json()["data"]["already_have_accounts"] == 1


class TestEligibilityRoutes:
    def test_get_eligibility(self, client, student_eligible):
        response = client.get(f"{API}/staff/students/8/eligibility")

        assert response.status_code == 200
        assert response.json()["data"]["overall_status"] == "eligible"

    def test_get_eligibility_missing(self, client, db_session):
        create_student(db_session, 3, overall_status=None)

        response = client.get(f"{API}/staff/students/3/eligibility")

        assert response.status_code == 404
        assert response.json()["meta"]["error_code"] == "ELIGIBILITY_STATUS_NOT_FOUND"

    def test_update_eligibility(self, client, db_session):
        create_student(db_session, 4, EligibilityOverallStatus.NOT_ELIGIBLE)

        response = client.put(
            f"{API}/staff/students/4/eligibility",
            json={"manual_override": True, "reason": "Approved by coordinator"},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["overall_status"] == "override"
        assert data["reason"] == "Approved by coordinator"


class TestPasswordResetRoutes:
    def test_full_reset_flow(self, client, db_session):
        create_student(
            db_session,
            5,
            email="flow@example.com",
            user_id=55,
            user_status=UserStatus.ACTIVE,
        )

        requested = client.post(
            f"{API}/shared/auth/password-reset/request",
            json={"loginId": "flow@example.com"},
        )
        assert requested.status_code == 200
        otp = requested.json()["data"]["otp"]

        verified = client.post(
            f"{API}/shared/auth/password-reset/verify",
            json={"loginId": "flow@example.com", "otp": otp},
        )
        assert verified.status_code == 200

        reset = client.post(
            f"{API}/shared/auth/password-reset/reset",
            json={"loginId": "flow@example.com", "otp": otp, "newPassword": "N3w!Password"},
        )
        assert reset.status_code == 200

    def test_request_for_unknown_user(self, client):
        response = client.post(
            f"{API}/shared/auth/password-reset/request",
            json={"loginId": "nobody@example.com"},
        )

        assert response.status_code == 404

    def test_verify_wrong_otp(self, client, db_session):
        create_student(
            db_session,
            6,
            email="wrong@example.com",
            user_id=66,
            user_status=UserStatus.ACTIVE,
        )

        response = client.post(
            f"{API}/shared/auth/password-reset/verify",
            json={"loginId": "wrong@example.com", "otp": "123456"},
        )

        assert response.status_code == 401
        assert response.json()["meta"]["error_code"] == "INVALID_OTP"
