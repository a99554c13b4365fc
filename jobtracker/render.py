"""
Word (.docx) rendering of tailored resume content.

The layout is fixed. Output is a pure function of the input: core document
properties and zip entry timestamps are pinned so the same content always
renders to the same bytes.
"""
import io
import re
import zipfile
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from urllib.parse import quote

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Inches, Pt

from .errors import DocumentRenderError
from .schemas import TailoredContent

logger = logging.getLogger(__name__)

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
SKILL_SEPARATOR = " • "
BULLET = "•"

_FIXED_TIMESTAMP = datetime(2000, 1, 1, tzinfo=timezone.utc)
_ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)
_WS_RX = re.compile(r"\s+")


@dataclass(frozen=True)
class RenderedDocument:
    content: bytes
    filename: str
    media_type: str = DOCX_MEDIA_TYPE


def resume_filename(company: str, title: str, ext: str = "docx") -> str:
    """Resume_<Company>_<Title>.<ext>, whitespace runs replaced with underscores."""
    return f"Resume_{_WS_RX.sub('_', company)}_{_WS_RX.sub('_', title)}.{ext}"


def content_disposition(filename: str) -> str:
    """Attachment header value; non-ASCII names also go in filename* (RFC 6266)."""
    ascii_name = filename.encode("ascii", "ignore").decode().replace('"', "") or "Resume.docx"
    value = f'attachment; filename="{ascii_name}"'
    if ascii_name != filename:
        value += f"; filename*=UTF-8''{quote(filename, safe='')}"
    return value


def _add_bottom_rule(paragraph) -> None:
    pPr = paragraph._p.get_or_add_pPr()
    border = OxmlElement("w:pBdr")
    bottom = OxmlElement("w:bottom")
    bottom.set(qn("w:val"), "single")
    bottom.set(qn("w:sz"), "6")
    bottom.set(qn("w:space"), "1")
    bottom.set(qn("w:color"), "auto")
    border.append(bottom)
    pPr.append(border)


def _section_heading(doc, text: str) -> None:
    heading = doc.add_heading(text, level=2)
    _add_bottom_rule(heading)


def build_document(content: TailoredContent):
    doc = Document()

    # Header placeholder
    name = doc.add_paragraph()
    name.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = name.add_run("[YOUR NAME]")
    run.bold = True
    run.font.size = Pt(16)

    contact = doc.add_paragraph()
    contact.alignment = WD_ALIGN_PARAGRAPH.CENTER
    contact.add_run("[Email] | [Phone] | [LinkedIn] | [Location]").font.size = Pt(10)
    doc.add_paragraph()

    _section_heading(doc, "PROFESSIONAL SUMMARY")
    doc.add_paragraph(content.summary)
    doc.add_paragraph()

    _section_heading(doc, "SKILLS")
    doc.add_paragraph(SKILL_SEPARATOR.join(content.skills))
    doc.add_paragraph()

    _section_heading(doc, "EXPERIENCE")
    for exp in content.experience:
        role = doc.add_paragraph()
        role.add_run(exp.title).bold = True
        role.add_run(f" | {exp.company}")

        doc.add_paragraph().add_run(exp.duration).italic = True

        for bullet in exp.bullets:
            p = doc.add_paragraph(f"{BULLET} {bullet}")
            p.paragraph_format.left_indent = Inches(0.25)
        doc.add_paragraph()

    _section_heading(doc, "EDUCATION")
    doc.add_paragraph(content.education)

    props = doc.core_properties
    props.author = ""
    props.last_modified_by = ""
    props.revision = 1
    props.created = _FIXED_TIMESTAMP
    props.modified = _FIXED_TIMESTAMP
    return doc


def _normalize_zip(blob: bytes) -> bytes:
    """Rewrite the package with fixed entry timestamps."""
    out = io.BytesIO()
    with zipfile.ZipFile(io.BytesIO(blob)) as src, zipfile.ZipFile(out, "w", zipfile.ZIP_DEFLATED) as dst:
        for info in src.infolist():
            entry = zipfile.ZipInfo(info.filename, date_time=_ZIP_EPOCH)
            entry.compress_type = zipfile.ZIP_DEFLATED
            entry.external_attr = 0o644 << 16
            dst.writestr(entry, src.read(info.filename))
    return out.getvalue()


def render_docx(content: TailoredContent) -> bytes:
    try:
        doc = build_document(content)
        buf = io.BytesIO()
        doc.save(buf)
        return _normalize_zip(buf.getvalue())
    except Exception as e:
        logger.error(f"Resume rendering failed: {e}")
        raise DocumentRenderError(f"Failed to render resume document: {e}") from e


def render_tailored_resume(content: TailoredContent, job_title: str, company: str) -> RenderedDocument:
    return RenderedDocument(
        content=render_docx(content),
        filename=resume_filename(company, job_title),
    )
