"""HTML bodies for merchant notification emails."""

from datetime import datetime
from html import escape

from utils.timezone import format_display, now_utc

_LAYOUT = """\
<div style="margin:0;padding:0;background-color:#f4f6f9;font-family:Arial,Helvetica,sans-serif;">
  <table width="600" cellpadding="0" cellspacing="0" align="center"
         style="background:#ffffff;border-radius:12px;margin:40px auto;">
    <tr>
      <td style="background:#4f46e5;padding:20px 30px;color:#ffffff;">
        <h2 style="margin:0;">SabbPe Support</h2>
      </td>
    </tr>
    <tr>
      <td style="padding:30px;color:#333;">
{body}
      </td>
    </tr>
    <tr>
      <td style="background:#f3f4f6;padding:20px;text-align:center;font-size:12px;color:#777;">
        &copy; {year} SabbPe. All rights reserved.<br/>
        This is an automated email. Please do not reply.
      </td>
    </tr>
  </table>
</div>
"""


def _render(body: str) -> str:
    return _LAYOUT.format(body=body, year=now_utc().year)


def ticket_created(name: str | None, ticket_id: str, title: str) -> str:
    return _render(f"""\
        <h3>Hello {escape(name or "Merchant")},</h3>
        <p>Your support ticket has been successfully created.
           Our team will review your issue and respond shortly.</p>
        <p><strong>Ticket ID:</strong> {escape(ticket_id)}<br/>
           <strong>Title:</strong> {escape(title)}<br/>
           <strong>Status:</strong> OPEN</p>
        <p>You will receive updates whenever the status changes.</p>""")


def ticket_status_changed(name: str | None, title: str, status: str, updated_at: datetime) -> str:
    return _render(f"""\
        <h3>Hello {escape(name or "Customer")},</h3>
        <p>Your ticket status has been updated.</p>
        <p><strong>Ticket:</strong> {escape(title)}<br/>
           <strong>New Status:</strong> {escape(status)}<br/>
           <strong>Updated:</strong> {format_display(updated_at)}</p>
        <p>SabbPe Support Team</p>""")


def merchant_approved(name: str | None, business_name: str | None) -> str:
    return _render(f"""\
        <h3>Congratulations {escape(name or "Merchant")}!</h3>
        <p>Your merchant account has been successfully approved.
           You can now access all SabbPe merchant features.</p>
        <p><strong>Status:</strong> APPROVED<br/>
           <strong>Business:</strong> {escape(business_name or "-")}</p>""")


def merchant_rejected(name: str | None, reason: str | None) -> str:
    return _render(f"""\
        <h3>Hello {escape(name or "Merchant")},</h3>
        <p>After reviewing your submission, we regret to inform you
           that your merchant account has not been approved.</p>
        <p><strong>Status:</strong> REJECTED<br/>
           <strong>Reason:</strong> {escape(reason or "Not specified")}</p>
        <p>You may update your documents and resubmit for review.</p>""")
