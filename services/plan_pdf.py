"""
Workout Plan PDF Renderer

Lays out a persisted, normalized plan as an A4 PDF.

Section order is fixed:
header (logo, title, description), session metadata, introduction, warm-up,
circuits with exercise tables, cool-down, recovery, closing message.
Every page carries "Page n of N"; the last page also carries the trainer
attribution.

The renderer assumes normalized content (all list fields present). Missing
optional values are skipped rather than printed as blanks. Access control is
not done here; see services.plan_export.
"""

import io
import os
import logging
from functools import partial
from typing import Any, Dict, List, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from models import WorkoutPlan

logger = logging.getLogger(__name__)

PAGE_MARGIN = 50
LOGO_WIDTH = 100

EXERCISE_COLUMNS = ["Exercise", "Sets", "Reps", "Men", "Women", "Technique"]


class _NumberedCanvas(canvas.Canvas):
    """Defers page output until the total page count is known."""

    def __init__(self, *args, created_by: str = "", **kwargs):
        super().__init__(*args, **kwargs)
        self._created_by = created_by
        self._saved_page_states: List[Dict[str, Any]] = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._saved_page_states)
        for number, state in enumerate(self._saved_page_states, start=1):
            self.__dict__.update(state)
            self._draw_footer(number, total)
            super().showPage()
        super().save()

    def _draw_footer(self, number: int, total: int):
        width, _ = self._pagesize
        self.setFont("Helvetica", 8)
        self.setFillColor(colors.grey)
        self.drawCentredString(width / 2, PAGE_MARGIN / 2, f"Page {number} of {total}")

        if number == total and self._created_by:
            self.setFont("Helvetica-Bold", 10)
            self.setFillColor(colors.black)
            self.drawRightString(width - PAGE_MARGIN, PAGE_MARGIN / 2 + 12, f"Created by: {self._created_by}")


def _styles() -> Dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle("PlanTitle", parent=base["Title"], fontSize=22, alignment=TA_CENTER),
        "subtitle": ParagraphStyle("PlanSubtitle", parent=base["Normal"], fontSize=12, alignment=TA_CENTER),
        "meta": ParagraphStyle("PlanMeta", parent=base["Normal"], fontSize=10, alignment=TA_CENTER,
                               textColor=colors.grey),
        "section": ParagraphStyle("Section", parent=base["Heading2"], fontSize=16, spaceBefore=14, spaceAfter=6),
        "circuit": ParagraphStyle("Circuit", parent=base["Heading3"], fontSize=14, spaceBefore=10, spaceAfter=4),
        "label": ParagraphStyle("Label", parent=base["Normal"], fontName="Helvetica-Bold", fontSize=11,
                                spaceBefore=4),
        "body": ParagraphStyle("Body", parent=base["Normal"], fontSize=10, leading=13),
        "bullet": ParagraphStyle("Bullet", parent=base["Normal"], fontSize=10, leftIndent=12, leading=13),
        "cell": ParagraphStyle("Cell", parent=base["Normal"], fontSize=8, leading=10),
        "cell_header": ParagraphStyle("CellHeader", parent=base["Normal"], fontName="Helvetica-Bold",
                                      fontSize=8, leading=10),
        "cell_note": ParagraphStyle("CellNote", parent=base["Normal"], fontSize=7, leading=9,
                                    textColor=colors.grey),
    }


def _p(text: Any, style: ParagraphStyle) -> Paragraph:
    return Paragraph(escape(str(text)), style)


def _labelled(label: str, value: Optional[str], styles) -> List[Any]:
    if not value:
        return []
    return [_p(f"{label}:", styles["label"]), _p(value, styles["body"])]


def _bullets(label: str, items: List[str], styles) -> List[Any]:
    items = [i for i in items if i]
    if not items:
        return []
    return [_p(f"{label}:", styles["label"])] + [_p(f"• {item}", styles["bullet"]) for item in items]


def _logo(logo_path: Optional[str]) -> List[Any]:
    if not logo_path:
        return []
    # Local files only; a URL here would mean a fetch inside the export request.
    if not os.path.isfile(logo_path):
        logger.warning(f"Workspace logo {logo_path} is not a local file; skipped")
        return []
    try:
        reader = ImageReader(logo_path)
        img_width, img_height = reader.getSize()
        height = LOGO_WIDTH * img_height / img_width
        image = Image(logo_path, width=LOGO_WIDTH, height=height)
        image.hAlign = "LEFT"
        return [image, Spacer(1, 8)]
    except Exception as e:
        logger.warning(f"Could not load workspace logo {logo_path}: {e}")
        return []


def _header(plan: WorkoutPlan, styles, logo_path: Optional[str]) -> List[Any]:
    elements = _logo(logo_path)
    elements.append(_p(plan.title, styles["title"]))
    if plan.description:
        elements.append(_p(plan.description, styles["subtitle"]))
    if plan.start_date and plan.end_date:
        start = plan.start_date.strftime("%d/%m/%Y")
        end = plan.end_date.strftime("%d/%m/%Y")
        elements.append(_p(f"Duration: {start} to {end}", styles["meta"]))
    elements.append(Spacer(1, 12))
    return elements


def _session_details(content: Dict[str, Any], styles) -> List[Any]:
    details = content.get("sessionDetails") or {}
    rows = [
        ("Session", details.get("type")),
        ("Name", details.get("name")),
        ("Coach", details.get("coach")),
        ("Duration", f"{details['duration']} minutes" if str(details.get("duration", "")).isdigit()
         else details.get("duration")),
        ("Location", details.get("location")),
        ("Fitness Level", details.get("fitnessLevel")),
        ("Focus", details.get("focusArea")),
    ]
    rows = [(label, value) for label, value in rows if value]
    equipment = content.get("equipmentNeeded") or []
    if equipment:
        rows.append(("Equipment", ", ".join(equipment)))
    if not rows:
        return []

    table = Table(
        [[_p(label, styles["cell_header"]), _p(value, styles["cell"])] for label, value in rows],
        colWidths=[90, 405],
        hAlign="LEFT",
    )
    table.setStyle(TableStyle([
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("BACKGROUND", (0, 0), (0, -1), colors.whitesmoke),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.lightgrey),
    ]))
    return [table, Spacer(1, 8)]


def _introduction(content: Dict[str, Any], styles) -> List[Any]:
    intro = content.get("introduction") or {}
    body = (
        _labelled("Overview", intro.get("overview"), styles)
        + _labelled("Intensity", intro.get("intensity"), styles)
        + _bullets("Objectives", intro.get("objectives", []), styles)
        + _labelled("Preparation", intro.get("preparation"), styles)
    )
    if not body:
        return []
    return [_p("Introduction", styles["section"])] + body


def _timed_items(heading: str, items: List[Dict[str, Any]], styles) -> List[Any]:
    if not items:
        return []
    elements = [_p(heading, styles["section"])]
    for item in items:
        line = item.get("exercise", "")
        if item.get("duration"):
            line = f"{line} ({item['duration']})"
        elements.append(_p(f"• {line}", styles["bullet"]))
        for extra in ("technique", "notes"):
            if item.get(extra):
                elements.append(_p(item[extra], styles["cell_note"]))
    return elements


def _exercise_table(exercises: List[Dict[str, Any]], styles) -> Table:
    rows = [[_p(col, styles["cell_header"]) for col in EXERCISE_COLUMNS]]
    for ex in exercises:
        name_cell: List[Any] = [_p(ex.get("exercise", ""), styles["cell"])]
        if ex.get("notes"):
            name_cell.append(_p(ex["notes"], styles["cell_note"]))
        rows.append([
            name_cell,
            _p(ex.get("sets") or "N/A", styles["cell"]),
            _p(ex.get("reps") or "N/A", styles["cell"]),
            _p(ex.get("men") or "", styles["cell"]),
            _p(ex.get("woman") or "", styles["cell"]),
            _p(ex.get("technique") or "", styles["cell"]),
        ])

    table = Table(rows, colWidths=[110, 40, 50, 55, 55, 185], repeatRows=1, hAlign="LEFT")
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
    ]))
    return table


def _main_workout(content: Dict[str, Any], styles) -> List[Any]:
    circuits = content.get("mainWorkout") or []
    if not circuits:
        return []
    elements = [_p("Workout Plan", styles["section"])]
    for index, circuit in enumerate(circuits, start=1):
        elements.append(_p(f"Circuit {circuit.get('circuitNumber') or index}", styles["circuit"]))
        elements += _labelled("Explanation", circuit.get("explanation"), styles)
        elements += _labelled("Objective", circuit.get("objective"), styles)
        elements += _labelled("Setup Instructions", circuit.get("setupInstructions"), styles)
        exercises = circuit.get("exercises") or []
        if exercises:
            elements.append(Spacer(1, 4))
            elements.append(_exercise_table(exercises, styles))
        elements.append(Spacer(1, 8))
    return elements


def _recovery(content: Dict[str, Any], styles) -> List[Any]:
    recovery = content.get("recovery") or {}
    body = (
        _bullets("Immediate Steps", recovery.get("immediateSteps", []), styles)
        + _bullets("Nutrition Tips", recovery.get("nutritionTips", []), styles)
        + _labelled("Rest Recommendations", recovery.get("restRecommendations"), styles)
        + _labelled("Next Day Guidance", recovery.get("nextDayGuidance"), styles)
    )
    if not body:
        return []
    return [_p("Recovery", styles["section"])] + body


def build_story(plan: WorkoutPlan, styles, logo_path: Optional[str] = None) -> List[Any]:
    content = plan.content or {}
    story = _header(plan, styles, logo_path)
    story += _session_details(content, styles)
    story += _introduction(content, styles)
    story += _timed_items("Warm-up", content.get("warmup") or [], styles)
    story += _main_workout(content, styles)
    story += _timed_items("Cool-down", content.get("cooldown") or [], styles)
    story += _recovery(content, styles)
    if content.get("closingMessage"):
        story += [Spacer(1, 12), _p(content["closingMessage"], styles["body"])]
    return story


def render_plan_pdf(
    plan: WorkoutPlan,
    *,
    trainer_name: str,
    logo_path: Optional[str] = None,
) -> bytes:
    """Render one plan to PDF bytes."""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=PAGE_MARGIN,
        rightMargin=PAGE_MARGIN,
        topMargin=PAGE_MARGIN,
        bottomMargin=PAGE_MARGIN,
        title=plan.title,
        author=trainer_name,
    )
    doc.build(
        build_story(plan, _styles(), logo_path),
        canvasmaker=partial(_NumberedCanvas, created_by=trainer_name),
    )
    return buffer.getvalue()
