from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from typing import Dict

from docx import Document
from docx.shared import Pt
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from careerdocs.models.generation import ArtifactKind

DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

BASE_FILENAMES: Dict[ArtifactKind, str] = {
    ArtifactKind.COVER_LETTER: "Cover-Letter",
    ArtifactKind.SHORT_PROFILE: "Short-Profile",
}


@dataclass
class GeneratedFile:
    filename: str
    content_type: str
    data: bytes


class DocumentService:
    """
    Generates downloadable documents (DOCX/PDF) for a generated cover letter
    or short profile.
    """

    font_name = "Poppins"
    font_size = Pt(10)

    def artifact_docx(self, kind: ArtifactKind, text: str) -> GeneratedFile:
        doc = Document()
        style = doc.styles["Normal"]
        style.font.name = self.font_name
        style.font.size = self.font_size

        # one paragraph per line, blank lines kept as spacing
        for para in text.split("\n"):
            doc.add_paragraph(para)

        buf = BytesIO()
        doc.save(buf)
        return GeneratedFile(
            filename=f"{BASE_FILENAMES[kind]}.docx",
            content_type=DOCX_CONTENT_TYPE,
            data=buf.getvalue(),
        )

    def artifact_pdf(self, kind: ArtifactKind, text: str) -> GeneratedFile:
        buf = BytesIO()
        c = canvas.Canvas(buf, pagesize=A4)
        width, height = A4

        textobject = c.beginText(54, height - 72)  # margins
        textobject.setFont("Helvetica", 10)

        for line in text.strip().split("\n"):
            for wrapped in self._wrap_line(line, max_chars=95):
                if textobject.getY() < 72:
                    c.drawText(textobject)
                    c.showPage()
                    textobject = c.beginText(54, height - 72)
                    textobject.setFont("Helvetica", 10)
                textobject.textLine(wrapped)
        c.drawText(textobject)
        c.showPage()
        c.save()

        return GeneratedFile(
            filename=f"{BASE_FILENAMES[kind]}.pdf",
            content_type="application/pdf",
            data=buf.getvalue(),
        )

    # -----------------------
    # helpers
    # -----------------------
    def _wrap_line(self, line: str, max_chars: int) -> list[str]:
        if len(line) <= max_chars:
            return [line]
        out: list[str] = []
        cur = ""
        for w in line.split(" "):
            if len(cur) + len(w) + 1 <= max_chars:
                cur = (cur + " " + w).strip()
            else:
                if cur:
                    out.append(cur)
                cur = w
        if cur:
            out.append(cur)
        return out
