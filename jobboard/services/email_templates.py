"""
JobBoard - Email templates for application notifications.
"""
from dataclasses import dataclass
from html import escape
from typing import Optional

from ..config import settings


@dataclass(frozen=True)
class EmailContent:
    subject: str
    html: str
    text: str


STATUS_LABELS = {
    "contacted": "Contacted",
    "interviewing": "Interviewing",
    "offered": "Offer Extended",
    "rejected": "Not Selected",
}

STATUS_COLORS = {
    "contacted": "#06b6d4",
    "interviewing": "#eab308",
    "offered": "#f97316",
    "rejected": "#ef4444",
}

STATUS_MESSAGES = {
    "contacted": (
        "The recruiter has reached out regarding your application. "
        "They may contact you directly to discuss next steps."
    ),
    "interviewing": (
        "Your application has progressed to the interview stage. "
        "The recruiter will contact you with details about the interview process."
    ),
    "offered": (
        "An offer has been extended for this position. "
        "The recruiter will contact you with details about the offer."
    ),
    "rejected": (
        "Thank you for your interest in this position. While this opportunity didn't "
        "work out, we encourage you to continue exploring other positions on JobBoard."
    ),
}


def get_status_changed_email(
    candidate_name: Optional[str],
    status: Optional[str],
    job_title: Optional[str] = None,
    job_company: Optional[str] = None,
    recruiter_name: Optional[str] = None,
    base_url: Optional[str] = None,
) -> EmailContent:
    """Build the email sent to a candidate when their application status changes."""
    status = getattr(status, "value", status)
    label = STATUS_LABELS.get(status or "") or status or "Updated"
    color = STATUS_COLORS.get(status or "", "#6b7280")
    message = STATUS_MESSAGES.get(status or "", "")
    dashboard_url = f"{(base_url or settings.notifications.base_url).rstrip('/')}/job-seeker"

    subject = f"Application Update: {label}"
    if job_title:
        subject += f" - {job_title}"

    job_html = ""
    if job_title:
        company_html = (
            f'<p style="margin: 5px 0;"><strong>Company:</strong> {escape(job_company)}</p>'
            if job_company else ""
        )
        job_html = f"""
            <div style="background-color: #f9fafb; padding: 15px; border-radius: 8px; margin: 20px 0;">
                <h3 style="color: #374151; margin-top: 0;">Job Details</h3>
                <p style="margin: 5px 0;"><strong>Position:</strong> {escape(job_title)}</p>
                {company_html}
            </div>
        """

    message_html = f'<p style="margin: 0; color: #374151;">{message}</p>' if message else ""
    recruiter_html = (
        f'<p style="margin-top: 20px; color: #6b7280; font-size: 14px;">Recruiter: {escape(recruiter_name)}</p>'
        if recruiter_name else ""
    )

    html = f"""
        <div style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif;
                     max-width: 600px; margin: 0 auto; padding: 24px;">
            <h2 style="color: #2563eb; margin-bottom: 16px;">Application Status Update</h2>
            <p>Hello {escape(candidate_name or '')},</p>
            <p>The status of your application has been updated.</p>
            {job_html}
            <div style="background-color: {color}15; padding: 15px; border-radius: 8px;
                        border-left: 4px solid {color}; margin: 20px 0;">
                <p style="margin: 0 0 10px 0;">
                    <strong style="color: {color};">Status: {escape(label)}</strong>
                </p>
                {message_html}
            </div>
            <p style="text-align: center; margin: 32px 0;">
                <a href="{dashboard_url}"
                   style="background: #2563eb; color: white; padding: 12px 24px;
                          border-radius: 8px; text-decoration: none; font-weight: 600;
                          display: inline-block;">
                    View My Applications
                </a>
            </p>
            {recruiter_html}
        </div>
        """

    lines = [
        "Application Status Update",
        "",
        f"Hello {candidate_name or ''},",
        "",
        "The status of your application has been updated.",
        "",
    ]
    if job_title:
        lines += ["Job Details:", f"Position: {job_title}"]
        if job_company:
            lines.append(f"Company: {job_company}")
        lines.append("")
    lines.append(f"Status: {label}")
    if message:
        lines.append(message)
    lines += ["", f"View your applications: {dashboard_url}"]
    if recruiter_name:
        lines += ["", f"Recruiter: {recruiter_name}"]

    return EmailContent(subject=subject, html=html, text="\n".join(lines))
