"""
Transactional email templates.

All templates use inline CSS for email client compatibility.
Each template function returns (subject, html_body, text_body).
"""

from __future__ import annotations

from html import escape

# Color constants
BG_PAGE = "#F4F4F4"
BG_CARD = "#FFFFFF"
TEXT_PRIMARY = "#333333"
TEXT_SECONDARY = "#666666"
LINK = "#007BFF"
DANGER = "#DC3545"


def _base_layout(title: str, content: str) -> str:
    """Wrap content in the base email layout."""
    return f"""\
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: {TEXT_PRIMARY}; margin: 0; padding: 0;">
    <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
        <div style="background-color: {BG_PAGE}; padding: 20px; text-align: center;">
            <h1 style="color: {TEXT_PRIMARY}; margin: 0;">{title}</h1>
        </div>
        <div style="background-color: {BG_CARD}; padding: 30px;">
            {content}
        </div>
        <div style="background-color: {BG_PAGE}; padding: 20px; text-align: center; font-size: 12px; color: {TEXT_SECONDARY};">
            <p style="margin: 0;">This is an automated message. Please do not reply to this email.</p>
        </div>
    </div>
</body>
</html>"""


def _button(url: str, label: str, color: str = LINK) -> str:
    """Render a call-to-action button followed by the raw link."""
    return f"""\
<div style="text-align: center; margin: 30px 0;">
    <a href="{url}" style="background-color: {color}; color: #FFFFFF; padding: 12px 30px; text-decoration: none; border-radius: 5px; display: inline-block;">
        {label}
    </a>
</div>
<p>Or copy and paste this link into your browser:</p>
<p style="word-break: break-all; color: {LINK};">{url}</p>"""


def welcome_email(name: str | None, app_name: str, dashboard_url: str) -> tuple[str, str, str]:
    """
    Welcome email sent after sign-up.

    Returns:
        (subject, html_body, text_body)
    """
    display = escape(name) if name else "there"
    subject = f"Welcome to {app_name}!"
    content = f"""\
<h2 style="color: {TEXT_PRIMARY};">Welcome to {escape(app_name)}!</h2>
<p>Hi {display},</p>
<p>Thank you for signing up! Your account has been created and you can start using it right away.</p>
{_button(dashboard_url, "Open your dashboard")}
<p>If you have any questions, feel free to reach out to our support team.</p>
<p>Best regards,<br />The Team</p>"""
    html_body = _base_layout("Welcome!", content)
    text_body = (
        f"Hi {name or 'there'},\n\n"
        f"Thank you for signing up to {app_name}! Your account has been created.\n\n"
        f"Open your dashboard: {dashboard_url}\n\n"
        f"-- The Team"
    )
    return subject, html_body, text_body


def password_changed_email(name: str | None) -> tuple[str, str, str]:
    """
    Password changed notification.

    Returns:
        (subject, html_body, text_body)
    """
    display = escape(name) if name else "there"
    subject = "Your password has been changed"
    content = f"""\
<h2 style="color: {TEXT_PRIMARY};">Password changed</h2>
<p>Hi {display},</p>
<p>Your password was successfully changed.</p>
<p style="color: {DANGER};">If you didn't make this change, contact support immediately.</p>"""
    html_body = _base_layout("Password Changed", content)
    text_body = (
        f"Hi {name or 'there'},\n\n"
        f"Your password was successfully changed.\n\n"
        f"If you didn't make this change, contact support immediately."
    )
    return subject, html_body, text_body


def verification_email(verify_url: str, expires_hours: int = 24) -> tuple[str, str, str]:
    """
    Email address confirmation, sent after sign-up when verification is required.

    Returns:
        (subject, html_body, text_body)
    """
    subject = "Verify your email address"
    content = f"""\
<h2 style="color: {TEXT_PRIMARY};">Verify your email address</h2>
<p>Hi there,</p>
<p>Please verify your email address by clicking the button below:</p>
{_button(escape(verify_url), "Verify Email")}
<p>This link will expire in {expires_hours} hours.</p>
<p>If you didn't create an account, please ignore this email.</p>"""
    html_body = _base_layout("Verify Your Email", content)
    text_body = (
        f"Hi there,\n\n"
        f"Please verify your email address by visiting this link:\n\n{verify_url}\n\n"
        f"This link will expire in {expires_hours} hours.\n\n"
        f"If you didn't create an account, please ignore this email."
    )
    return subject, html_body, text_body
