"""
Export module: application report PDF and crew list CSV.
"""

import csv
import io
import logging
import textwrap
from typing import Optional, Sequence

import fitz

from review.display import format_date, format_file_size
from review.schema import ApplicationRecord, CrewMember
from review.scoring import summarize_scores

logger = logging.getLogger(__name__)


PAGE_WIDTH, PAGE_HEIGHT = fitz.paper_size("a4")
MARGIN = 50
LINE_HEIGHT = 14
WRAP_WIDTH = 95

# FiraGO (pymupdf-fonts) covers Latin and Thai; base-14 Helvetica has no Thai glyphs.
REPORT_FONT = "figo"
REPORT_FONT_BOLD = "figbo"

CREW_CSV_HEADERS = [
    "id", "full_name", "full_name_th", "role", "custom_role",
    "age", "phone", "email", "school_name", "student_id",
]


class _ReportWriter:
    """Flows lines of text down A4 pages, starting a new page when full."""

    def __init__(self, doc: fitz.Document):
        self.doc = doc
        self.fonts = {name: fitz.Font(name).buffer for name in (REPORT_FONT, REPORT_FONT_BOLD)}
        self.page: Optional[fitz.Page] = None
        self.y = 0.0
        self._new_page()

    def _new_page(self) -> None:
        self.page = self.doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        for fontname, buffer in self.fonts.items():
            self.page.insert_font(fontname=fontname, fontbuffer=buffer)
        self.y = MARGIN

    def line(self, text: str, fontsize: float = 10, bold: bool = False) -> None:
        if self.y + LINE_HEIGHT > PAGE_HEIGHT - MARGIN:
            self._new_page()
        self.page.insert_text(
            (MARGIN, self.y + fontsize),
            text,
            fontsize=fontsize,
            fontname=REPORT_FONT_BOLD if bold else REPORT_FONT,
        )
        self.y += max(LINE_HEIGHT, fontsize + 4)

    def paragraph(self, text: str) -> None:
        for wrapped in textwrap.wrap(text, WRAP_WIDTH) or [""]:
            self.line(wrapped)

    def heading(self, text: str) -> None:
        self.y += 6
        self.line(text, fontsize=13, bold=True)

    def field(self, label: str, value) -> None:
        self.paragraph(f"{label}: {value if value not in (None, '') else '-'}")


def export_application_pdf(application: ApplicationRecord) -> bytes:
    """
    Render a printable review report for one application.

    Returns:
        PDF file contents
    """
    doc = fitz.open()
    try:
        writer = _ReportWriter(doc)
        writer.line(application.film_title or "Untitled", fontsize=18, bold=True)
        if application.film_title_th:
            writer.line(application.film_title_th, fontsize=12)
        writer.field("Application ID", application.application_id)
        writer.field("Category", application.competition_category.value)

        writer.heading("Film Information")
        writer.field("Format", application.format.value)
        writer.field("Duration", f"{application.duration} min")
        writer.field("Genres", ", ".join(application.genres))
        writer.field("Nationality", application.nationality)
        writer.field("Synopsis", application.synopsis)
        if application.chiangmai_connection:
            writer.field("Connection to Chiang Mai", application.chiangmai_connection)

        writer.heading("Submitter")
        writer.field("Name", application.submitter_name)
        if application.submitter_name_th:
            writer.field("Name (Thai)", application.submitter_name_th)
        writer.field("Age", application.submitter_age)
        writer.field("Role", application.submitter_custom_role or application.submitter_role)
        writer.field("Phone", application.submitter_phone)
        writer.field("Email", application.submitter_email)

        writer.heading("Files")
        for label, file_ref in (
            ("Film", application.files.film_file),
            ("Poster", application.files.poster_file),
            ("Proof", application.files.proof_file),
        ):
            if file_ref is None:
                continue
            writer.field(label, f"{file_ref.name or '-'} ({format_file_size(file_ref.size)})")

        writer.heading(f"Crew ({len(application.crew_members)})")
        for member in application.crew_members:
            name = f"{member.full_name} ({member.full_name_th})" if member.full_name_th else member.full_name
            writer.paragraph(f"- {name} | {member.custom_role or member.role} | {member.age}")

        summary = summarize_scores(application.scores)
        writer.heading("Review")
        writer.field("Status", application.review_status.value)
        writer.field("Average score", f"{summary.average_score:.1f}/40 ({summary.count} scores)")
        for score in application.scores:
            line = f"- {score.admin_name or score.admin_id}: {score.total_score:g}"
            if score.comments:
                line += f" ({score.comments})"
            writer.paragraph(line)
        writer.field("Flagged", f"yes ({application.flag_reason or '-'})" if application.flagged else "no")
        writer.field("Notes", application.admin_notes)
        writer.field("Created", format_date(application.created_at))
        writer.field("Last modified", format_date(application.last_modified))
        writer.field("Last reviewed", format_date(application.last_reviewed_at))

        pdf_bytes = doc.tobytes()
    finally:
        doc.close()

    logger.info(f"📄 Exported PDF for {application.application_id} ({len(pdf_bytes)} bytes)")
    return pdf_bytes


def export_crew_csv(crew: Sequence[CrewMember]) -> io.BytesIO:
    """
    Write the crew roster to CSV.

    Returns:
        BytesIO with UTF-8 CSV data (header row plus one row per member)
    """
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=CREW_CSV_HEADERS)
    writer.writeheader()
    for member in crew:
        row = member.model_dump(include=set(CREW_CSV_HEADERS))
        writer.writerow({key: "" if row.get(key) is None else row[key] for key in CREW_CSV_HEADERS})
    return io.BytesIO(output.getvalue().encode("utf-8"))

