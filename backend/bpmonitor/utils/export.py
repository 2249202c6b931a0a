"""
Export utilities: readings CSV and per-patient PDF report.
"""
import csv
import io
import logging
from datetime import datetime
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from bpmonitor.analytics.categories import CATEGORY_HEX, categorize

logger = logging.getLogger(__name__)

READINGS_CSV_FIELDS = [
    'id', 'patient_id', 'patient_name', 'systolic', 'diastolic', 'pulse',
    'category', 'recorded_at', 'location', 'notes', 'recorded_by', 'created_at',
]

_LABEL_TABLE_STYLE = TableStyle([
    ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
    ('ALIGN', (0, 0), (0, -1), 'RIGHT'),
    ('ALIGN', (1, 0), (1, -1), 'LEFT'),
    ('BOTTOMPADDING', (0, 0), (-1, -1), 5),
])


def generate_readings_csv(readings, patient_names=None):
    """Generate CSV export of blood pressure readings.

    Args:
        readings: BloodPressureReading objects
        patient_names: Optional dict mapping patient_id to display name

    Returns:
        StringIO object containing CSV data
    """
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=READINGS_CSV_FIELDS)
    writer.writeheader()

    patient_names = patient_names or {}

    for reading in readings:
        writer.writerow({
            'id': reading.id,
            'patient_id': reading.patient_id,
            'patient_name': patient_names.get(reading.patient_id, f'Patient #{reading.patient_id}'),
            'systolic': reading.systolic,
            'diastolic': reading.diastolic,
            'pulse': reading.pulse if reading.pulse is not None else '',
            'category': categorize(reading.systolic, reading.diastolic).value,
            'recorded_at': reading.recorded_at.isoformat() if reading.recorded_at else '',
            'location': reading.location or '',
            'notes': reading.notes or '',
            'recorded_by': reading.recorded_by,
            'created_at': reading.created_at.isoformat() if reading.created_at else '',
        })

    output.seek(0)
    return output


def _insights_rows(insights):
    if not insights.to_dict()['has_data']:
        return [['Insights:', insights.message]]
    return [
        ['Total Readings:', str(insights.total_readings)],
        ['Average BP:', f'{insights.avg_systolic}/{insights.avg_diastolic} mmHg '
                        f'({insights.overall_category.value})'],
        ['Systolic Trend:', f'{insights.systolic_trend:+d} mmHg'],
        ['Diastolic Trend:', f'{insights.diastolic_trend:+d} mmHg'],
        ['High Risk Readings:', f'{insights.risk_percentage}%'],
    ]


def generate_patient_report_pdf(patient, readings, insights, days=None):
    """Generate a PDF report for one patient.

    Args:
        patient: User model object (role patient)
        readings: the patient's readings, newest first
        insights: InsightSummary or NO_INSIGHTS for the same readings
        days: window the readings were taken from, for the subtitle

    Returns:
        BytesIO object containing PDF data
    """
    output = io.BytesIO()
    doc = SimpleDocTemplate(output, pagesize=letter, topMargin=0.5*inch, bottomMargin=0.5*inch)

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'ReportTitle',
        parent=styles['Heading1'],
        fontSize=18,
        spaceAfter=20,
    )
    heading_style = ParagraphStyle(
        'ReportHeading',
        parent=styles['Heading2'],
        fontSize=14,
        spaceBefore=15,
        spaceAfter=10,
    )
    normal_style = styles['Normal']

    elements = []

    elements.append(Paragraph(f"Blood Pressure Report: {patient.full_name}", title_style))
    generated = datetime.utcnow().strftime('%B %d, %Y at %H:%M UTC')
    window = f' (last {days} days)' if days else ''
    elements.append(Paragraph(f"Generated: {generated}{window}", normal_style))
    elements.append(Spacer(1, 20))

    elements.append(Paragraph("Patient Information", heading_style))
    info = []
    try:
        info.append(['Email:', patient.email or 'N/A'])
        info.append(['Phone:', patient.phone or 'N/A'])
        info.append(['Date of Birth:', patient.date_of_birth or 'N/A'])
    except Exception as e:
        logger.error(f"Error decrypting PHI for patient {patient.id}: {e}")
        info = [['Email:', 'N/A'], ['Phone:', 'N/A'], ['Date of Birth:', 'N/A']]
    info.append(['Gender:', patient.gender or 'N/A'])

    info_table = Table(info, colWidths=[2*inch, 4*inch])
    info_table.setStyle(_LABEL_TABLE_STYLE)
    elements.append(info_table)
    elements.append(Spacer(1, 15))

    elements.append(Paragraph("Insights", heading_style))
    summary_table = Table(_insights_rows(insights), colWidths=[2*inch, 4*inch])
    summary_table.setStyle(_LABEL_TABLE_STYLE)
    elements.append(summary_table)

    for rec in getattr(insights, 'recommendations', []):
        elements.append(Spacer(1, 6))
        elements.append(Paragraph(f"<b>{rec.title}</b>: {rec.message}", normal_style))
    elements.append(Spacer(1, 15))

    if readings:
        elements.append(Paragraph("Recent Readings (Last 20)", heading_style))

        rows = [['Date', 'Systolic', 'Diastolic', 'Pulse', 'Category']]
        row_styles = []
        for index, r in enumerate(readings[:20], start=1):
            category = categorize(r.systolic, r.diastolic)
            rows.append([
                r.recorded_at.strftime('%m/%d/%Y %H:%M') if r.recorded_at else 'N/A',
                str(r.systolic),
                str(r.diastolic),
                str(r.pulse) if r.pulse else 'N/A',
                category.value,
            ])
            row_styles.append(('TEXTCOLOR', (4, index), (4, index),
                               colors.HexColor(CATEGORY_HEX[category])))

        reading_table = Table(rows, colWidths=[1.5*inch, 1*inch, 1*inch, 1*inch, 1*inch])
        reading_table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('BACKGROUND', (0, 0), (-1, 0), colors.grey),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.black),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 5),
            ('TOPPADDING', (0, 0), (-1, -1), 5),
        ] + row_styles))
        elements.append(reading_table)

    doc.build(elements)
    output.seek(0)
    return output
