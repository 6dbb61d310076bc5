# puzzles/pdf_utils.py
from reportlab.lib.pagesizes import letter
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib import colors
from reportlab.lib.units import inch
from datetime import datetime, timezone

def generate_puzzle_pdf(board, difficulty, buffer):
    """Generate a printable sheet of a puzzle board"""
    doc = SimpleDocTemplate(buffer, pagesize=letter)
    elements = []

    styles = getSampleStyleSheet()

    # Title
    title = Paragraph(f"Sudoku - {difficulty.title()}", styles['Title'])
    elements.append(title)
    elements.append(Spacer(1, 0.2 * inch))

    generated = Paragraph(f"<b>Generated:</b> {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M')} UTC", styles['Normal'])
    elements.append(generated)
    elements.append(Spacer(1, 0.3 * inch))

    data = [[str(cell['value']) if cell['value'] else '' for cell in row] for row in board]

    style = [
        ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('FONTNAME', (0, 0), (-1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 0), (-1, -1), 18),
        ('TEXTCOLOR', (0, 0), (-1, -1), colors.grey),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.black),
        ('BOX', (0, 0), (-1, -1), 2, colors.black),
    ]

    # Heavy borders around each 3x3 box
    for br in range(0, 9, 3):
        for bc in range(0, 9, 3):
            style.append(('BOX', (bc, br), (bc + 2, br + 2), 2, colors.black))

    # Givens in bold black, player entries stay grey
    for r, row in enumerate(board):
        for c, cell in enumerate(row):
            if cell['is_initial']:
                style.append(('FONTNAME', (c, r), (c, r), 'Helvetica-Bold'))
                style.append(('TEXTCOLOR', (c, r), (c, r), colors.black))

    table = Table(data, colWidths=[0.6 * inch] * 9, rowHeights=[0.6 * inch] * 9)
    table.setStyle(TableStyle(style))
    elements.append(table)

    # Generate PDF
    doc.build(elements)
