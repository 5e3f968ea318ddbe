'''
Invoice building and PDF rendering.

build_invoice() collects and formats everything that goes on a student's invoice;
render_invoice_pdf() lays it out as a paginated PDF. Neither touches the network.
'''
import re
from decimal import Decimal
from io import BytesIO
from typing import Iterable, Optional

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..common.config import settings
from ..models.check_ins import CheckIn
from ..models.invoice import Invoice, InvoiceLine
from ..models.students import Student
from .billing import check_ins_for_student
from .clock import to_local_date

HEADER_FILL = colors.Color(240 / 255, 240 / 255, 240 / 255)


# --- Formatting Helpers ---

def _underscored(name: str) -> str:
    return re.sub(r"\s+", "_", name or "")


def invoice_filename(student_name: str) -> str:
    return f"invoice_{_underscored(student_name)}.pdf"


def teacher_invoice_filename(teacher_name: str) -> str:
    return f"invoice-{_underscored(teacher_name)}.pdf"


def format_price(amount: Decimal) -> str:
    """Row prices print the amount as entered: 50 -> '$50', 42.5 -> '$42.5'."""
    if amount == amount.to_integral_value():
        return f"{settings.CURRENCY_SYMBOL}{int(amount)}"
    return f"{settings.CURRENCY_SYMBOL}{amount.normalize()}"


def format_total(amount: Decimal) -> str:
    return f"{settings.CURRENCY_SYMBOL}{amount:.2f}"


def format_date(timestamp_ms: int) -> str:
    day = to_local_date(timestamp_ms)
    return f"{day.month}/{day.day}/{day.year}"


# --- Invoice Assembly ---

def build_invoice(
    student: Student,
    check_ins: Iterable[CheckIn],
    next_month_lessons: Optional[int] = None
) -> Invoice:
    """
    Every check-in of the student becomes a line, whatever its active flag.
    The class/teacher labels are fixed by configuration, not looked up.
    """
    own_check_ins = check_ins_for_student(check_ins, student.id)
    lines = [
        InvoiceLine(
            lesson_type=check_in.lesson_type or "N/A",
            date=format_date(check_in.timestamp),
            price=format_price(check_in.lesson_cost),
        )
        for check_in in own_check_ins
    ]
    total_amount = sum((check_in.lesson_cost for check_in in own_check_ins), Decimal("0"))

    projected_tuition = None
    if next_month_lessons is not None:
        projected_tuition = format_total(next_month_lessons * student.cost_per_lesson)

    return Invoice(
        file_name=invoice_filename(student.name or ""),
        student_name=student.name or "",
        class_label=settings.INVOICE_CLASS_LABEL,
        teacher_label=settings.INVOICE_TEACHER_LABEL,
        next_month_lessons=next_month_lessons,
        projected_tuition=projected_tuition,
        lines=lines,
        total_amount=total_amount,
        total=format_total(total_amount),
    )


# --- PDF Rendering ---

def _styles() -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        'title': ParagraphStyle('InvoiceTitle', parent=base['Title'], fontName='Helvetica-Bold', fontSize=22, alignment=TA_CENTER),
        'total': ParagraphStyle('InvoiceTotal', parent=base['Normal'], fontName='Helvetica-Bold', fontSize=12, alignment=TA_RIGHT),
        'footer': ParagraphStyle('InvoiceFooter', parent=base['Normal'], fontSize=12, alignment=TA_CENTER),
    }


def _details_table(rows: list[list[str]]) -> Table:
    table = Table(rows, colWidths=[40 * mm, None], hAlign='LEFT')
    table.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('FONTNAME', (1, 0), (1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 0), (-1, -1), 12),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
    ]))
    return table


def render_invoice_pdf(invoice: Invoice) -> bytes:
    buffer = BytesIO()
    document = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        title=invoice.file_name,
        leftMargin=20 * mm,
        rightMargin=20 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
    )
    styles = _styles()

    details = [
        ["Student Name:", invoice.student_name],
        ["Class:", invoice.class_label],
        ["Teacher:", invoice.teacher_label],
    ]
    if invoice.next_month_lessons is not None:
        details.append(["Next Month Lessons:", str(invoice.next_month_lessons)])
        details.append(["Projected Tuition:", invoice.projected_tuition or ""])

    lesson_rows = [["Lesson Type", "Date", "Price"]]
    lesson_rows.extend([line.lesson_type, line.date, line.price] for line in invoice.lines)
    # repeatRows keeps the header on every page of a long history
    lessons_table = Table(lesson_rows, repeatRows=1, colWidths=[70 * mm, 50 * mm, 50 * mm])
    lessons_table.setStyle(TableStyle([
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
        ('BACKGROUND', (0, 0), (-1, 0), HEADER_FILL),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.Color(20 / 255, 20 / 255, 20 / 255)),
    ]))

    story = [
        Paragraph("Invoice", styles['title']),
        _details_table(details),
        Spacer(1, 10 * mm),
        lessons_table,
        Spacer(1, 8 * mm),
        Paragraph(f"Total Payable: {invoice.total}", styles['total']),
        Spacer(1, 10 * mm),
        Paragraph("Thank you for your business!", styles['footer']),
    ]
    document.build(story)
    return buffer.getvalue()


def render_teacher_invoice_pdf(teacher_name: str) -> bytes:
    buffer = BytesIO()
    document = SimpleDocTemplate(buffer, pagesize=A4, title=teacher_invoice_filename(teacher_name))
    styles = _styles()
    story = [
        Paragraph("Teacher Invoice", styles['title']),
        Spacer(1, 10 * mm),
        _details_table([["Name:", teacher_name]]),
    ]
    document.build(story)
    return buffer.getvalue()
