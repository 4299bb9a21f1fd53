"""Workshop workbook export (.xlsx).

Sheets: Summary, Use Cases, Challenges, Validation, Prioritization, Data Lineage.
"""
import io
import logging
from datetime import datetime, timezone

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from app.models.challenge import ChallengeLogEntry
from app.models.use_case import UseCase
from app.models.workshop import Workshop

logger = logging.getLogger(__name__)

HEADER_FILL = PatternFill(start_color="1F3A5F", end_color="1F3A5F", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True, size=11)
THIN_BORDER = Border(
    left=Side(style="thin", color="CCCCCC"),
    right=Side(style="thin", color="CCCCCC"),
    top=Side(style="thin", color="CCCCCC"),
    bottom=Side(style="thin", color="CCCCCC"),
)
SEVERITY_FILLS = {
    "high": PatternFill(start_color="E74C3C", end_color="E74C3C", fill_type="solid"),
    "medium": PatternFill(start_color="F39C12", end_color="F39C12", fill_type="solid"),
    "low": PatternFill(start_color="27AE60", end_color="27AE60", fill_type="solid"),
}
MONEY_FORMAT = '"$"#,##0'

SHEET_NAMES = (
    "Summary",
    "Use Cases",
    "Challenges",
    "Validation",
    "Prioritization",
    "Data Lineage",
)


def _apply_header_style(ws, row: int, col_count: int) -> None:
    """Apply dark-header styling to an Excel row (1-indexed)."""
    for col in range(1, col_count + 1):
        cell = ws.cell(row=row, column=col)
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
        cell.border = THIN_BORDER
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)


def _auto_width(ws) -> None:
    """Auto-size column widths based on content (capped at 60 chars)."""
    for col in ws.columns:
        max_len = 0
        col_letter = get_column_letter(col[0].column)
        for cell in col:
            if cell.value:
                max_len = max(max_len, min(len(str(cell.value)), 60))
        ws.column_dimensions[col_letter].width = max(max_len + 4, 12)


def _write_table(ws, headers: list[str], rows: list[list], start_row: int = 1) -> None:
    for col, header in enumerate(headers, start=1):
        ws.cell(row=start_row, column=col).value = header
    _apply_header_style(ws, start_row, len(headers))
    for i, row in enumerate(rows, start=start_row + 1):
        for col, value in enumerate(row, start=1):
            ws.cell(row=i, column=col).value = value
    ws.freeze_panes = ws.cell(row=start_row + 1, column=1)


def _cell_value(value):
    """openpyxl accepts scalars only."""
    if value is None or isinstance(value, (str, int, float)):
        return value
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)


def generate_workshop_workbook(
    workshop: Workshop,
    use_cases: list[UseCase],
    challenges: list[ChallengeLogEntry],
) -> bytes:
    """Render a workshop into an .xlsx workbook and return its bytes."""
    wb = Workbook()

    # ── Summary ───────────────────────────────────────────────────────────────
    ws = wb.active
    ws.title = "Summary"
    ws.merge_cells("A1:C1")
    ws["A1"] = f"AI Catalyst Workshop: {workshop.company_name}"
    ws["A1"].font = Font(size=16, bold=True, color="1F3A5F")
    ws["A2"] = f"Generated: {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M UTC')}"
    ws["A2"].font = Font(italic=True, color="666666")

    validation = workshop.validation_results
    summary_rows = [
        ["Industry", workshop.industry or ""],
        ["Facilitator", workshop.facilitator_name or ""],
        ["Status", workshop.status.value],
        ["Use Cases", len(use_cases)],
        ["Challenges", len(challenges)],
        ["Total Original Value", validation.total_original_value if validation else
         sum(uc.total_benefit for uc in use_cases)],
        ["Total Validated Value", validation.total_validated_value if validation else None],
        ["Average Confidence", validation.average_confidence if validation else None],
    ]
    if workshop.readiness_scores is not None:
        summary_rows.append(["Overall Readiness (1-5)", workshop.readiness_scores.overall])
    _write_table(ws, ["Field", "Value"], summary_rows, start_row=4)
    for row in (10, 11):
        ws.cell(row=row, column=2).number_format = MONEY_FORMAT

    if workshop.synthesis is not None:
        row = 6 + len(summary_rows)
        ws.cell(row=row, column=1).value = "Executive Summary"
        ws.cell(row=row, column=1).font = Font(size=12, bold=True)
        ws.cell(row=row + 1, column=1).value = workshop.synthesis.executive_summary
        ws.cell(row=row + 1, column=1).alignment = Alignment(wrap_text=True, vertical="top")
    _auto_width(ws)

    # ── Use Cases ─────────────────────────────────────────────────────────────
    ws = wb.create_sheet("Use Cases")
    headers = [
        "ID", "Title", "Function", "Sources", "Cost Savings", "Risk Reduction",
        "Revenue Impact", "Cash Flow", "Total Benefit", "Complexity",
        "Data Readiness", "Integration Effort", "Agentic Pattern",
        "Value Score", "Readiness Score", "Time to Value (months)", "HITL Checkpoint",
    ]
    rows = [
        [
            uc.id, uc.title, uc.business_function,
            ", ".join(s.value for s in uc.sources),
            uc.cost_savings, uc.risk_reduction, uc.revenue_impact,
            uc.cash_flow_improvement, uc.total_benefit, uc.complexity,
            uc.data_readiness, uc.integration_effort, uc.agentic_pattern,
            uc.value_score, uc.readiness_score, uc.time_to_value_months,
            uc.hitl_checkpoint,
        ]
        for uc in use_cases
    ]
    _write_table(ws, headers, rows)
    for r in range(2, len(rows) + 2):
        for c in range(5, 10):
            ws.cell(row=r, column=c).number_format = MONEY_FORMAT
    _auto_width(ws)

    # ── Challenges ────────────────────────────────────────────────────────────
    ws = wb.create_sheet("Challenges")
    headers = [
        "Use Case", "Type", "Field", "Severity", "Original", "Challenged",
        "Evidence", "Status", "Responded By", "Batch",
    ]
    rows = [
        [
            c.use_case_id, c.challenge_type.value, c.field_name, c.severity.value,
            _cell_value(c.original_value), _cell_value(c.challenged_value),
            c.evidence, c.status.value, c.responded_by, str(c.batch_id),
        ]
        for c in challenges
    ]
    _write_table(ws, headers, rows)
    for r, c in enumerate(challenges, start=2):
        ws.cell(row=r, column=4).fill = SEVERITY_FILLS.get(c.severity.value, PatternFill())
    _auto_width(ws)

    # ── Validation ────────────────────────────────────────────────────────────
    ws = wb.create_sheet("Validation")
    headers = [
        "Use Case", "Original Benefit", "Validated Benefit", "Confidence",
        "Factor", "Adjustment Reason", "Benchmark Source", "Risk Flags",
    ]
    rows = [
        [
            r.use_case_id, r.original_benefit, r.validated_benefit,
            r.confidence_level, r.confidence_factor, r.adjustment_reason,
            r.benchmark_source, ", ".join(r.risk_flags),
        ]
        for r in (validation.results if validation else [])
    ]
    _write_table(ws, headers, rows)
    for r in range(2, len(rows) + 2):
        for c in (2, 3):
            ws.cell(row=r, column=c).number_format = MONEY_FORMAT
    _auto_width(ws)

    # ── Prioritization ────────────────────────────────────────────────────────
    ws = wb.create_sheet("Prioritization")
    matrix = workshop.prioritization_matrix
    headers = ["Use Case", "Title", "Value Score", "Readiness Score",
               "Quadrant", "Track", "Benefit Basis"]
    rows = [
        [a.use_case_id, a.title, a.value_score, a.readiness_score,
         a.quadrant.value, a.track.value, a.benefit_basis]
        for a in (matrix.ranked() if matrix else [])
    ]
    _write_table(ws, headers, rows)
    _auto_width(ws)

    # ── Data Lineage ──────────────────────────────────────────────────────────
    ws = wb.create_sheet("Data Lineage")
    headers = ["Use Case", "Title", "Data Sources", "Inputs", "Outputs",
               "Explainability", "Observability", "Governance"]
    rows = [
        [e.use_case_id, e.use_case_title, ", ".join(e.data_sources),
         ", ".join(e.inputs), ", ".join(e.outputs), e.explainability,
         e.observability, e.governance]
        for e in workshop.data_lineage
    ]
    _write_table(ws, headers, rows)
    _auto_width(ws)

    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)
    logger.info(f"Exported workbook for workshop {workshop.id}")
    return buf.getvalue()
