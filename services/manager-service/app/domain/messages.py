"""Bodies for the outbound emails sent by manager workflows."""

from __future__ import annotations

from html import escape

from .contracts import ProvisioningRequest

WELCOME_SUBJECT = "Welcome to TicketEase"
ONBOARDING_SUBJECT = "Manager Information"


def welcome_email(business_email: str, credential: str) -> tuple[str, str]:
    """Return the subject and HTML body carrying a new manager's sign-in details."""
    body = (
        "Welcome to TicketEase. An account has been created for you with the following details"
        f"<br>Email: {escape(business_email)}, <br>Password: {escape(credential)}"
    )
    return WELCOME_SUBJECT, body


def onboarding_request_email(request: ProvisioningRequest) -> tuple[str, str]:
    body = (
        f"Business Email: {escape(request.business_email)}<br>"
        f"Company Name: {escape(request.company_name)}<br>"
        f"Reason to Onboard: {escape(request.company_description or '')}"
    )
    return ONBOARDING_SUBJECT, body
