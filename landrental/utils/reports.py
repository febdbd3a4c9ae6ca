# Rental Agreement PDF Generation
import logging
import time
from datetime import datetime
from pathlib import Path
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

logger = logging.getLogger(__name__)

AGREEMENTS_URL_PREFIX = '/uploads/agreements'


def _money(value):
    # Built-in PDF fonts have no rupee glyph
    return f'Rs. {value:,.2f}'


def _date(value):
    return value.strftime('%d %b %Y') if value else 'N/A'


def _styles():
    styles = getSampleStyleSheet()
    return {
        'title': ParagraphStyle(
            'AgreementTitle',
            parent=styles['Heading1'],
            fontSize=20,
            spaceAfter=20,
            alignment=TA_CENTER,
            textColor=colors.darkgreen,
        ),
        'heading': ParagraphStyle(
            'AgreementHeading',
            parent=styles['Heading2'],
            fontSize=14,
            spaceBefore=14,
            spaceAfter=8,
        ),
        'body': ParagraphStyle(
            'AgreementBody',
            parent=styles['Normal'],
            fontSize=11,
            spaceAfter=4,
        ),
    }


def _line(label, value, style):
    return Paragraph(f'<b>{escape(label)}:</b> {escape(str(value))}', style)


def build_agreement_story(rental, land, farmer, landowner):
    """Flowables for the agreement; platypus paginates them"""
    styles = _styles()
    body = styles['body']
    story = [
        Paragraph('LAND RENTAL AGREEMENT', styles['title']),
        _line('Agreement Date', _date(datetime.utcnow()), body),
        _line('Agreement ID', rental.id, body),
        Spacer(1, 10),

        Paragraph('PARTIES', styles['heading']),
        _line('Landowner', landowner.name, body),
        _line('Farmer', farmer.name, body),

        Paragraph('LAND DETAILS', styles['heading']),
        _line('Land Title', land.title, body),
        _line('Location', land.location_label, body),
        _line('Total Acres', land.total_acres, body),
        _line('Rented Acres', rental.rented_acres, body),
        _line('Price per Acre', _money(rental.price_per_acre), body),

        Paragraph('RENTAL TERMS', styles['heading']),
        _line('Start Date', _date(rental.start_date), body),
        _line('End Date', _date(rental.end_date), body),
        _line('Duration', f'{rental.duration} months', body),
        _line('Total Amount', _money(rental.total_amount), body),
        _line('Payment Schedule', rental.payment_schedule, body),
        _line('Security Deposit', _money(rental.security_deposit or 0), body),
        _line('Maintenance', rental.maintenance, body),
        _line('Utilities', rental.utilities, body),
    ]

    story.append(Paragraph('PAYMENT SCHEDULE', styles['heading']))
    rows = [['#', 'Due Date', 'Amount']]
    for payment in rental.payments:
        rows.append([str(payment.installment_index + 1), _date(payment.due_date), _money(payment.amount)])
    table = Table(rows, colWidths=[0.6 * inch, 2 * inch, 2 * inch], repeatRows=1)
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.darkgreen),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
    ]))
    story.append(table)

    if rental.crops_allowed:
        story.append(Paragraph('ALLOWED CROPS', styles['heading']))
        story.append(Paragraph(escape(', '.join(rental.crops_allowed)), body))

    if rental.restrictions:
        story.append(Paragraph('RESTRICTIONS', styles['heading']))
        story.append(Paragraph(escape(', '.join(rental.restrictions)), body))

    story.append(Paragraph('SIGNATURES', styles['heading']))
    story.append(Spacer(1, 12))
    story.append(Paragraph('Landowner: ______________________', body))
    story.append(Paragraph('Date: ______________________', body))
    story.append(Spacer(1, 12))
    story.append(Paragraph('Farmer: ______________________', body))
    story.append(Paragraph('Date: ______________________', body))
    return story


def generate_agreement_pdf(rental, land, farmer, landowner, output_dir):
    """
    Render the rental agreement and write it under output_dir.

    The rental must already have an id and its payment schedule.

    Returns:
        str: URL path of the document, /uploads/agreements/<file>
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    file_name = f'agreement_{rental.id}_{int(time.time() * 1000)}.pdf'
    file_path = output_dir / file_name

    doc = SimpleDocTemplate(
        str(file_path),
        pagesize=A4,
        rightMargin=72, leftMargin=72,
        topMargin=72, bottomMargin=36,
        title=f'Land Rental Agreement {rental.id}',
    )
    doc.build(build_agreement_story(rental, land, farmer, landowner))
    logger.info('Generated agreement %s for rental %s', file_name, rental.id)
    return f'{AGREEMENTS_URL_PREFIX}/{file_name}'


def agreement_file_path(agreement_url, output_dir):
    """Local path for a stored agreement URL, or None when it is not ours"""
    if not agreement_url or not agreement_url.startswith(AGREEMENTS_URL_PREFIX + '/'):
        return None
    file_name = Path(agreement_url).name
    return Path(output_dir) / file_name
