from datetime import date
from html import escape
from typing import Dict, Optional

EMAIL_BASE_STYLE = """
body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; }
.container { max-width: 600px; margin: 0 auto; padding: 20px; }
.header { color: white; padding: 30px; text-align: center; border-radius: 10px 10px 0 0; }
.content { background-color: #f9f9f9; padding: 30px; border-radius: 0 0 10px 10px; }
.badge { color: white; padding: 10px 20px; border-radius: 20px; display: inline-block; margin: 20px 0; font-weight: bold; }
.box { background-color: #fff; padding: 15px; margin: 20px 0; border-radius: 5px; }
.credential-value { background-color: #f3f4f6; padding: 10px; border-radius: 5px; font-family: 'Courier New', monospace; }
.footer { text-align: center; margin-top: 20px; font-size: 12px; color: #666; }
"""

ELIGIBILITY_STATUS_CONFIG: Dict[str, Dict[str, str]] = {
    "eligible": {
        "color": "#10b981",
        "title": "Congratulations! You Are Eligible",
        "message": "You have successfully met all requirements for placement.",
    },
    "not_eligible": {
        "color": "#ef4444",
        "title": "Eligibility Requirements Not Met",
        "message": "Unfortunately, you have not yet met all the requirements for placement eligibility. Please review the details below.",
    },
    "pending": {
        "color": "#f59e0b",
        "title": "Eligibility Status: Pending Review",
        "message": "Your eligibility is currently under review. We will notify you once the review is complete.",
    },
    "override": {
        "color": "#8b5cf6",
        "title": "Eligibility Override Applied",
        "message": "An eligibility override has been applied to your account. You may now proceed with placement.",
    },
}


def _wrap(header_color: str, header_html: str, body_html: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head><style>{EMAIL_BASE_STYLE}</style></head>
<body>
  <div class="container">
    <div class="header" style="background-color: {header_color};">{header_html}</div>
    <div class="content">{body_html}</div>
    <div class="footer">
      <p>This is an automated email. Please do not reply directly to this message.</p>
      <p>&copy; {date.today().year} Placement Portal. All rights reserved.</p>
    </div>
  </div>
</body>
</html>"""


def render_login_credentials(
    student_name: str, login_id: str, temporary_password: str, login_url: str
) -> Dict[str, str]:
    """Subject and HTML body for the first-login credentials email."""
    name = escape(student_name)
    body = f"""
      <div class="badge" style="background-color: #10b981;">ELIGIBILITY APPROVED</div>
      <p>Dear {name},</p>
      <p>You have met all the eligibility requirements for placement. Your account has been activated and you can now access the Placement Portal.</p>
      <div class="box" style="border-left: 4px solid #667eea;">
        <p><strong>Login ID / Email:</strong></p>
        <div class="credential-value">{escape(login_id)}</div>
        <p><strong>Temporary Password:</strong></p>
        <div class="credential-value">{escape(temporary_password)}</div>
      </div>
      <p><a href="{escape(login_url)}">Login to Portal</a></p>
      <div class="box" style="border-left: 4px solid #f59e0b;">
        <strong>Important:</strong>
        <ul>
          <li>This is a temporary password; change it after your first login.</li>
          <li>Never share your credentials with anyone.</li>
        </ul>
      </div>
      <p>Best wishes for your placement journey!</p>
      <p><strong>The Placement Team</strong></p>
    """
    return {
        "subject": "Your Placement Portal Login Credentials - You Are Eligible!",
        "html": _wrap(
            "#667eea",
            f"<h1>Congratulations, {name}!</h1><p>You are now eligible for placement</p>",
            body,
        ),
        "text": (
            f"Dear {student_name},\n\n"
            "You are now eligible for placement and your account has been activated.\n\n"
            f"Login ID: {login_id}\n"
            f"Temporary password: {temporary_password}\n"
            f"Login: {login_url}\n\n"
            "Please change your password after your first login.\n"
        ),
    }


def render_eligibility_status_update(
    student_name: str, status: str, reason: Optional[str] = None
) -> Dict[str, str]:
    """Subject and HTML body for an eligibility status notification."""
    config = ELIGIBILITY_STATUS_CONFIG.get(status, ELIGIBILITY_STATUS_CONFIG["pending"])
    label = status.upper().replace("_", " ")
    details = (
        f'<div class="box" style="border-left: 4px solid {config["color"]};"><strong>Details:</strong><br>{escape(reason)}</div>'
        if reason
        else ""
    )
    body = f"""
      <p>Dear {escape(student_name)},</p>
      <div class="badge" style="background-color: {config['color']};">STATUS: {label}</div>
      <p>{config['message']}</p>
      {details}
      <p>If you have any questions, please contact our support team.</p>
      <p><strong>The Placement Team</strong></p>
    """
    return {
        "subject": f"Eligibility Status Update - {config['title']}",
        "html": _wrap(config["color"], f"<h1>{config['title']}</h1>", body),
        "text": (
            f"Dear {student_name},\n\nStatus: {label}\n{config['message']}\n"
            + (f"\nDetails: {reason}\n" if reason else "")
        ),
    }


def render_password_reset_otp(otp: str, expiry_minutes: int) -> Dict[str, str]:
    """Subject and HTML body for the password reset OTP email."""
    body = f"""
      <p>Hello,</p>
      <p>You have requested to reset your password. Use the following One-Time Password (OTP) to complete the process:</p>
      <div class="box" style="border: 2px dashed #4CAF50; text-align: center;">
        <div style="font-size: 32px; font-weight: bold; letter-spacing: 5px;">{escape(otp)}</div>
      </div>
      <ul>
        <li>This OTP is valid for <strong>{expiry_minutes} minutes</strong> only</li>
        <li>Do not share this OTP with anyone</li>
        <li>If you didn't request this, please ignore this email</li>
      </ul>
    """
    return {
        "subject": "Password Reset OTP",
        "html": _wrap("#4CAF50", "<h1>Password Reset Request</h1>", body),
        "text": f"Your password reset OTP is {otp}. It expires in {expiry_minutes} minutes.\n",
    }
