"""
Notify module for the FDA Calendar Scraper.

This module renders a catalog into an email report and delivers it via
SMTP with TLS. The report is grouped by phase, then by catalyst date,
in catalog order.
"""

import os
import smtplib
import ssl
import time
from datetime import datetime, timezone
from email.message import EmailMessage
from itertools import groupby
from typing import List, Optional, Tuple

from fda_calendar.catalog import Catalog, CatalogKey
from fda_calendar.parse import CatalystRow, PhaseLabel
from fda_calendar.utils import get_env_var, get_logger, millis_since


# Module logger
logger = get_logger("notify")

SMTP_TIMEOUT = 30  # seconds
DISPLAY_DATE_FORMAT = "%m/%d/%Y"


def get_email_credentials() -> Tuple[str, int, str, str, str, str]:
    """
    Get email credentials from environment variables.

    Returns:
        Tuple of (smtp_host, smtp_port, smtp_user, smtp_password, email_from, email_to).

    Raises:
        ValueError: If any required environment variable is not set.
    """
    smtp_host = get_env_var("SMTP_HOST", required=True)
    smtp_port_str = get_env_var("SMTP_PORT", required=True)
    smtp_user = get_env_var("SMTP_USER", required=True)
    smtp_password = get_env_var("SMTP_PASSWORD", required=True)
    email_from = get_env_var("EMAIL_FROM", required=True)
    email_to = get_env_var("EMAIL_TO", required=True)

    # get_env_var with required=True raises ValueError if None
    assert smtp_host is not None
    assert smtp_port_str is not None
    assert smtp_user is not None
    assert smtp_password is not None
    assert email_from is not None
    assert email_to is not None

    try:
        smtp_port = int(smtp_port_str)
    except ValueError:
        raise ValueError(f"SMTP_PORT must be a valid integer, got: {smtp_port_str}")

    return smtp_host, smtp_port, smtp_user, smtp_password, email_from, email_to


def is_email_configured() -> bool:
    """
    Check if email notification is configured.

    Returns:
        True if all email environment variables are set, False otherwise.
    """
    required_vars = [
        "SMTP_HOST", "SMTP_PORT", "SMTP_USER",
        "SMTP_PASSWORD", "EMAIL_FROM", "EMAIL_TO"
    ]

    for var in required_vars:
        value = os.environ.get(var)
        if not value or value.strip() == "":
            return False

    return True


def format_subject(now: Optional[datetime] = None) -> str:
    """Subject line, e.g. ``Catalyst Update May 02 2019``."""
    now = now or datetime.now(timezone.utc)
    return f"Catalyst Update {now.strftime('%b %d %Y')}"


def _escape_html(text: str) -> str:
    return (
        text
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def _group_by_phase(catalog: Catalog) -> List[Tuple[PhaseLabel, List[CatalogKey]]]:
    """Catalog keys grouped by phase label, both in catalog order."""
    return [
        (label, list(keys))
        for label, keys in groupby(catalog.keys(), key=lambda key: key[0])
    ]


def _phase_heading(catalog: Catalog, keys: List[CatalogKey]) -> str:
    # Display text comes from the rows; the label is only a grouping key.
    return catalog[keys[0]][0].phase


def _format_row_html(row: CatalystRow) -> List[str]:
    return [
        '        <div class="catalyst">',
        f'          <a href="{_escape_html(row.url)}">{_escape_html(row.symbol)}</a>'
        f' <span class="price">{row.price}</span>',
        f'          <div><strong>{_escape_html(row.drug_name)}</strong>'
        f' | {_escape_html(row.drug_indication)}'
        f' | <span class="phase">{_escape_html(row.phase)}</span></div>',
        f'          <div class="note">{_escape_html(row.catalyst_note)}</div>',
        "        </div>",
    ]


def format_email_body_html(catalog: Catalog) -> str:
    """
    Format the email body as HTML.

    Args:
        catalog: Catalog to render.

    Returns:
        Formatted HTML string for email body.
    """
    count = catalog.record_count

    html_lines = [
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        '  <meta charset="utf-8">',
        "  <style>",
        "    body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; }",
        "    .header { background-color: #2c5282; color: white; padding: 20px; border-radius: 5px 5px 0 0; }",
        "    .content { padding: 20px; background-color: #f9f9f9; }",
        "    .phase-section { margin-bottom: 25px; }",
        "    .phase-header { background-color: #4a90d9; color: white; padding: 10px 15px; border-radius: 5px 5px 0 0; }",
        "    .date-header { margin: 10px 0 5px 0; font-weight: bold; }",
        "    .catalyst { background-color: white; padding: 12px 15px; border-left: 4px solid #4a90d9; border-bottom: 1px solid #eee; }",
        "    .catalyst a { color: #4a90d9; text-decoration: none; font-weight: bold; }",
        "    .price { color: #666; }",
        "    .phase { font-style: italic; }",
        "    .note { font-size: 13px; color: #555; }",
        "    .footer { padding: 15px; font-size: 12px; color: #666; text-align: center; border-top: 1px solid #ddd; }",
        "  </style>",
        "</head>",
        "<body>",
        '  <div class="header">',
        f"    <h1>{_escape_html(format_subject())}</h1>",
        f'    <p>{count} catalyst{"s" if count != 1 else ""} found</p>',
        "  </div>",
        '  <div class="content">',
    ]

    if not catalog:
        html_lines.append("    <p>No upcoming catalysts matched the configured limits.</p>")

    for _label, keys in _group_by_phase(catalog):
        html_lines.extend([
            '    <div class="phase-section">',
            f'      <div class="phase-header"><h3>{_escape_html(_phase_heading(catalog, keys))}</h3></div>',
        ])
        for key in keys:
            html_lines.append(
                f'      <div class="date-header">{key[1].strftime(DISPLAY_DATE_FORMAT)}</div>'
            )
            for row in catalog[key]:
                html_lines.extend(_format_row_html(row))
        html_lines.append("    </div>")

    html_lines.extend([
        "  </div>",
        '  <div class="footer">',
        "    <p>This email was automatically sent by the FDA Calendar Scraper.</p>",
        "  </div>",
        "</body>",
        "</html>",
    ])

    return "\n".join(html_lines)


def format_email_body_plain(catalog: Catalog) -> str:
    """
    Format the email body as plain text.

    Args:
        catalog: Catalog to render.

    Returns:
        Formatted plain text string for email body.
    """
    count = catalog.record_count

    lines = [
        format_subject().upper(),
        "=" * 60,
        "",
        f"Catalysts Found: {count}",
        "",
    ]

    if not catalog:
        lines.extend(["No upcoming catalysts matched the configured limits.", ""])

    for _label, keys in _group_by_phase(catalog):
        lines.extend([
            "-" * 60,
            _phase_heading(catalog, keys).upper(),
            "-" * 60,
            "",
        ])
        for key in keys:
            lines.append(key[1].strftime(DISPLAY_DATE_FORMAT))
            for row in catalog[key]:
                lines.append(f"  {row.symbol} ({row.price}) {row.drug_name}: {row.drug_indication} [{row.phase}]")
                lines.append(f"    {row.catalyst_note}")
                lines.append(f"    URL: {row.url}")
            lines.append("")

    lines.extend([
        "=" * 60,
        "",
        "This email was automatically sent by the FDA Calendar Scraper.",
    ])

    return "\n".join(lines)


def send_email_notification(catalog: Catalog, dry_run: bool = False) -> bool:
    """
    Send the catalyst report via SMTP with TLS.

    Supports both:
    - Port 465: SMTP_SSL (implicit TLS)
    - Port 587: SMTP with STARTTLS (explicit TLS)

    Args:
        catalog: Catalog to report. An empty catalog still sends a report.
        dry_run: If True, don't actually send the email, just log.

    Returns:
        True if email was sent successfully, False otherwise.

    Note:
        This function fails gracefully - it logs errors but does not raise
        exceptions to avoid crashing the pipeline.
    """
    subject = format_subject()
    html_body = format_email_body_html(catalog)
    plain_body = format_email_body_plain(catalog)

    if dry_run:
        logger.info(f"[DRY RUN] Subject: {subject}")
        logger.info(f"[DRY RUN] Plain body:\n{plain_body}")
        return True

    if not is_email_configured():
        logger.error("Email notifications not configured (missing environment variables)")
        return False

    email_start = time.monotonic()
    logger.info(f"Sending catalyst report with {catalog.record_count} catalyst(s)")

    try:
        smtp_host, smtp_port, smtp_user, smtp_password, email_from, email_to = get_email_credentials()

        logger.info(f"Email config: host={smtp_host}, port={smtp_port}, from={email_from}, to={email_to}")

        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = email_from
        msg["To"] = email_to
        msg["Date"] = datetime.now(timezone.utc).strftime("%a, %d %b %Y %H:%M:%S +0000")

        msg.set_content(plain_body)
        msg.add_alternative(html_body, subtype="html")

        ssl_context = ssl.create_default_context()

        logger.info(f"Connecting to SMTP server: {smtp_host}:{smtp_port}")

        if smtp_port == 465:
            logger.debug("Using SMTP_SSL (implicit TLS) for port 465")
            with smtplib.SMTP_SSL(smtp_host, smtp_port, timeout=SMTP_TIMEOUT, context=ssl_context) as server:
                server.login(smtp_user, smtp_password)
                server.send_message(msg)
        else:
            logger.debug(f"Using SMTP with STARTTLS for port {smtp_port}")
            with smtplib.SMTP(smtp_host, smtp_port, timeout=SMTP_TIMEOUT) as server:
                server.starttls(context=ssl_context)
                server.login(smtp_user, smtp_password)
                server.send_message(msg)

        logger.info(f"Email sent to {email_to}")
        logger.info(f"Sending email took {millis_since(email_start)} millis")
        return True

    except ValueError as e:
        logger.error(f"Email configuration error: {e}")
        return False

    except smtplib.SMTPAuthenticationError as e:
        logger.error(f"SMTP authentication failed: {e}")
        return False

    except smtplib.SMTPConnectError as e:
        logger.error(f"Failed to connect to SMTP server: {e}")
        return False

    except smtplib.SMTPException as e:
        logger.error(f"SMTP error while sending email: {e}")
        return False

    except ssl.SSLError as e:
        logger.error(f"SSL/TLS error while sending email: {e}")
        return False

    except (TimeoutError, OSError) as e:
        logger.error(f"Network error while sending email: {e}")
        return False
