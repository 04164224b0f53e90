# puntoventa/shared/exports/pdf_export.py
import io
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle


def report_pdf(
    title: str,
    headers: Sequence[str],
    rows: List[Sequence[Any]],
    stats: Optional[List[Tuple[str, Any]]] = None,
    generated_at: Optional[datetime] = None
) -> bytes:
    """
    Instantánea en PDF de un reporte: título, fecha, bloque de estadísticas
    y tabla de filas.
    """
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=letter, title=title)
    styles = getSampleStyleSheet()
    story = [
        Paragraph(title, styles["Title"]),
        Spacer(1, 12),
        Paragraph(
            f"Generado el: {(generated_at or datetime.now()).strftime('%d/%m/%Y %H:%M:%S')}",
            styles["Normal"]
        ),
        Spacer(1, 12),
    ]

    if stats:
        stats_table = Table([[label, str(value)] for label, value in stats], hAlign="LEFT")
        stats_table.setStyle(TableStyle([
            ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 10),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
        ]))
        story.append(stats_table)
        story.append(Spacer(1, 12))

    table = Table([list(headers)] + [[str(v) for v in row] for row in rows], repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#f9a8d4")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.black),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, 0), 10),
        ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
        ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
        ("FONTSIZE", (0, 1), (-1, -1), 8),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]))
    story.append(table)
    story.append(Spacer(1, 12))
    story.append(Paragraph(f"Total de filas: {len(rows)}", styles["Normal"]))

    doc.build(story)
    return buffer.getvalue()
