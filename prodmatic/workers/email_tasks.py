"""
Email background tasks.
"""

import html
import logging

import resend

from prodmatic.core.config import settings
from prodmatic.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(
    name="prodmatic.workers.email_tasks.send_invitation_email", bind=True, max_retries=3
)
def send_invitation_email(
    self,  # type: ignore[no-untyped-def]
    to_email: str,
    org_name: str,
    org_slug: str,
    inviter_name: str,
    role: str,
    invitation_token: str,
    frontend_url: str,
) -> dict[str, str]:
    """
    Send an organization invitation via Resend.

    Retried with a linear backoff when Resend fails.

    Returns:
        Dict with status and message_id.
    """
    accept_url = f"{frontend_url}/invitations/{invitation_token}/accept"
    role_label = role.replace("_", " ")

    params: resend.Emails.SendParams = {
        "from": settings.EMAIL_FROM,
        "to": [to_email],
        "subject": f"You've been invited to join {org_name} on ProdMatic",
        "html": f"""
            <h2>You've been invited to ProdMatic</h2>
            <p><strong>{html.escape(inviter_name)}</strong> has invited you to join
            <strong>{html.escape(org_name)}</strong> as a
            <strong>{html.escape(role_label)}</strong>.</p>
            <p>
                <a href="{html.escape(accept_url)}"
                   style="background:#6366f1;color:#fff;padding:12px 24px;
                          border-radius:6px;text-decoration:none;display:inline-block;">
                    Accept Invitation
                </a>
            </p>
            <p>This invitation expires in {settings.INVITATION_TTL_HOURS} hours.</p>
            <p>If you did not expect this invitation, you can safely ignore this email.</p>
        """,
    }

    try:
        resend.api_key = settings.RESEND_API_KEY
        response = resend.Emails.send(params)
    except Exception as exc:
        logger.warning(
            "Invitation email failed",
            extra={"action": "MEMBER_INVITED", "path": org_slug},
        )
        raise self.retry(exc=exc, countdown=60 * (self.request.retries + 1))

    logger.info("Invitation email sent", extra={"action": "MEMBER_INVITED", "path": org_slug})
    return {"status": "sent", "message_id": response["id"]}
