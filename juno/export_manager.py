"""
Export Manager Module

Exports analyzed leads as a CSV summary and as email-client-ready text files,
and builds compose URLs that open a draft in Gmail or the default mail client.
"""

import csv
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import quote, urlencode

from .workflow_orchestrator import AnalyzedLead
from .utils import get_logger

logger = get_logger(__name__)

GMAIL_COMPOSE_URL = "https://mail.google.com/mail/?view=cm&fs=1"

CSV_HEADERS = [
    'Emails', 'Phone Numbers', 'Status', 'Entry Level', 'Reason',
    'Email Subject', 'Email Body', 'Description', 'Gmail Link', 'Mailto Link'
]


def gmail_compose_url(lead: AnalyzedLead) -> Optional[str]:
    """Gmail compose link for a drafted lead, or None if there is no draft."""
    if not lead.email_subject or not lead.email_body:
        return None
    params = urlencode({"to": lead.email, "su": lead.email_subject, "body": lead.email_body}, quote_via=quote)
    return f"{GMAIL_COMPOSE_URL}&{params}"


def mailto_url(lead: AnalyzedLead) -> Optional[str]:
    """mailto: link for a drafted lead, or None if there is no draft."""
    if not lead.email_subject or not lead.email_body:
        return None
    params = urlencode({"subject": lead.email_subject, "body": lead.email_body}, quote_via=quote)
    return f"mailto:{quote(lead.email, safe='@')}?{params}"


def _sanitize_filename(name: str) -> str:
    cleaned = re.sub(r'[^A-Za-z0-9._-]+', '_', name).strip('_')
    return cleaned[:50] or "lead"


class LeadExporter:
    """Handles exporting of analyzed leads."""

    def export_csv(self, leads: Iterable[AnalyzedLead], output_file: str) -> Dict[str, Any]:
        """Write one row per lead with its decision, draft and compose links."""
        path = Path(output_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        count = 0

        with open(path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(CSV_HEADERS)
            for lead in leads:
                writer.writerow([
                    lead.email,
                    lead.phone,
                    lead.status.value,
                    'yes' if lead.is_entry_level else 'no',
                    lead.rejection_reason,
                    lead.email_subject,
                    lead.email_body,
                    lead.description,
                    gmail_compose_url(lead) or '',
                    mailto_url(lead) or ''
                ])
                count += 1

        logger.info(f"Exported {count} leads to {path}")
        return {"files": [str(path)], "count": count, "type": "csv"}

    def format_email_for_client(self, lead: AnalyzedLead) -> str:
        return f"To: {lead.email}\nSubject: {lead.email_subject}\n\n{lead.email_body}\n"

    def export_email_client(self, leads: Iterable[AnalyzedLead], output_dir: str) -> Dict[str, Any]:
        """Write one text file per drafted email plus usage instructions."""
        email_dir = Path(output_dir)
        email_dir.mkdir(parents=True, exist_ok=True)

        exported_files: List[str] = []
        for lead in leads:
            if not lead.email_subject or not lead.email_body:
                continue
            email_file = email_dir / f"{lead.id}_{_sanitize_filename(lead.email)}.txt"
            with open(email_file, 'w', encoding='utf-8') as f:
                f.write(self.format_email_for_client(lead))
            exported_files.append(str(email_file))

        email_count = len(exported_files)

        instructions_file = email_dir / "EMAIL_INSTRUCTIONS.txt"
        with open(instructions_file, 'w', encoding='utf-8') as f:
            f.write(self._create_email_client_instructions())
        exported_files.append(str(instructions_file))

        logger.info(f"Exported {email_count} drafts to {email_dir}")
        return {"files": exported_files, "count": email_count, "type": "email_client"}

    def _create_email_client_instructions(self) -> str:
        return """EMAIL CLIENT INSTRUCTIONS
========================

This folder contains one drafted application email per entry-level lead.

USAGE:
1. Open an email file in a text editor
2. Copy the recipient from the To: line and the subject from the Subject: line
3. Create a new email in your client and paste the body
4. Review and personalize before sending

FILES:
Each file is named: LeadNumber_RecipientEmail.txt
"""
