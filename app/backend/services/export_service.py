"""
Export service for extracted reports.

Renders an ExtractedReport as pretty-printed JSON, a sectioned CSV file, or
an Excel workbook with one sheet per populated category.
"""

import csv
import io
import json
import logging
import re
from collections.abc import Callable
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Font

# Handle both package imports and standalone imports
try:
    from ..models import ExportFormat, ExportFormatInfo, ExtractedReport
except ImportError:
    from models import ExportFormat, ExportFormatInfo, ExtractedReport

logger = logging.getLogger(__name__)

MISSING = "N/A"
LIST_SEPARATOR = "; "
DEFAULT_EXPORT_NAME = "extracted-data"

EXPORT_FORMATS: dict[ExportFormat, ExportFormatInfo] = {
    ExportFormat.JSON: ExportFormatInfo(
        format=ExportFormat.JSON,
        name="JSON",
        description="JavaScript Object Notation - machine readable",
        extension=".json",
        mime_type="application/json",
    ),
    ExportFormat.CSV: ExportFormatInfo(
        format=ExportFormat.CSV,
        name="CSV",
        description="Comma Separated Values - spreadsheet compatible",
        extension=".csv",
        mime_type="text/csv",
    ),
    ExportFormat.EXCEL: ExportFormatInfo(
        format=ExportFormat.EXCEL,
        name="Excel",
        description="Microsoft Excel format with multiple sheets",
        extension=".xlsx",
        mime_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ),
}


def sanitize_filename(filename: str) -> str:
    """Reduce a name to lowercase letters, digits, dots, hyphens and single underscores."""
    name = re.sub(r"[^a-zA-Z0-9.-]", "_", filename)
    name = re.sub(r"_{2,}", "_", name)
    return name.strip("_").lower()


def export_filename(report: ExtractedReport, export_format: ExportFormat) -> str:
    """Download name for an export: the source PDF name with the format's extension."""
    stem = re.sub(r"\.pdf$", "", report.metadata.file_name, flags=re.IGNORECASE)
    stem = sanitize_filename(stem) or DEFAULT_EXPORT_NAME
    return f"{stem}{EXPORT_FORMATS[export_format].extension}"


def _number(value: float | None) -> Any:
    if value is None:
        return MISSING
    return int(value) if float(value).is_integer() else value


def _text(value: str | None) -> str:
    return value if value else MISSING


def _joined(values: list[str]) -> str:
    return LIST_SEPARATOR.join(values)


def _coordinates(area: Any) -> str:
    if area.coordinates is None:
        return MISSING
    return f"{area.coordinates.lat}, {area.coordinates.lng}"


def _percent(value: float | None) -> str:
    if value is None:
        return MISSING
    return f"{_number(value)}%"


Column = tuple[str, Callable[[Any], Any]]

# (section title, sheet name, report attribute, columns)
SECTIONS: list[tuple[str, str, str, list[Column]]] = [
    (
        "GOALS",
        "Goals",
        "goals",
        [
            ("ID", lambda g: g.id),
            ("Title", lambda g: g.title),
            ("Description", lambda g: g.description),
            ("Status", lambda g: g.status.value),
            ("Priority", lambda g: g.priority.value),
            ("Target Date", lambda g: _text(g.target_date)),
        ],
    ),
    (
        "BEST MANAGEMENT PRACTICES",
        "BMPs",
        "bmps",
        [
            ("ID", lambda b: b.id),
            ("Name", lambda b: b.name),
            ("Description", lambda b: b.description),
            ("Category", lambda b: b.category),
            ("Implementation Cost", lambda b: _number(b.implementation_cost)),
            ("Maintenance Cost", lambda b: _number(b.maintenance_cost)),
            ("Effectiveness", lambda b: _percent(b.effectiveness)),
            ("Applicable Areas", lambda b: _joined(b.applicable_areas)),
        ],
    ),
    (
        "IMPLEMENTATION ACTIVITIES",
        "Implementation",
        "implementation",
        [
            ("ID", lambda i: i.id),
            ("Name", lambda i: i.name),
            ("Description", lambda i: i.description),
            ("Start Date", lambda i: _text(i.start_date)),
            ("End Date", lambda i: _text(i.end_date)),
            ("Budget", lambda i: _number(i.budget)),
            ("Responsible", lambda i: i.responsible),
            ("Status", lambda i: i.status.value),
        ],
    ),
    (
        "MONITORING METRICS",
        "Monitoring",
        "monitoring",
        [
            ("ID", lambda m: m.id),
            ("Name", lambda m: m.name),
            ("Description", lambda m: m.description),
            ("Unit", lambda m: m.unit),
            ("Target Value", lambda m: _number(m.target_value)),
            ("Current Value", lambda m: _number(m.current_value)),
            ("Frequency", lambda m: m.frequency),
            ("Methodology", lambda m: m.methodology),
            ("Responsible Party", lambda m: m.responsible_party),
        ],
    ),
    (
        "OUTREACH ACTIVITIES",
        "Outreach",
        "outreach",
        [
            ("ID", lambda o: o.id),
            ("Name", lambda o: o.name),
            ("Description", lambda o: o.description),
            ("Target Audience", lambda o: o.target_audience),
            ("Method", lambda o: o.method),
            ("Timeline", lambda o: o.timeline),
            ("Expected Outcome", lambda o: o.expected_outcome),
            ("Budget", lambda o: _number(o.budget)),
        ],
    ),
    (
        "GEOGRAPHIC AREAS",
        "Geographic Areas",
        "geographic_areas",
        [
            ("ID", lambda a: a.id),
            ("Name", lambda a: a.name),
            ("Type", lambda a: a.type.value),
            ("Area", lambda a: _number(a.area)),
            ("Coordinates", _coordinates),
            ("Characteristics", lambda a: _joined(a.characteristics)),
        ],
    ),
]


def _summary_rows(report: ExtractedReport) -> list[tuple[str, Any]]:
    summary = report.summary
    return [
        ("Total Goals", summary.total_goals),
        ("Total BMPs", summary.total_bmps),
        ("Completion Rate", f"{_number(summary.completion_rate)}%"),
        ("Extraction Accuracy", f"{summary.extraction_accuracy}%"),
        ("Processing Time", f"{summary.processing_time}ms"),
    ]


def _metadata_rows(report: ExtractedReport) -> list[tuple[str, Any]]:
    metadata = report.metadata
    return [
        ("File Name", metadata.file_name),
        ("File Size", f"{metadata.file_size} bytes"),
        ("Extracted At", metadata.extracted_at.isoformat()),
        ("Processing Method", metadata.processing_method),
    ]


class ExportService:
    """Renders reports in the supported export formats."""

    def export(self, report: ExtractedReport, export_format: ExportFormat) -> bytes:
        """
        Render a report.

        Args:
            report: The report to export.
            export_format: Target format.

        Returns:
            The encoded file contents.
        """
        logger.info(
            "Exporting '%s' as %s", report.metadata.file_name, export_format.value.upper()
        )
        if export_format == ExportFormat.JSON:
            return self.to_json(report).encode("utf-8")
        if export_format == ExportFormat.CSV:
            return self.to_csv(report).encode("utf-8")
        return self.to_excel(report)

    def to_json(self, report: ExtractedReport) -> str:
        """Pretty-printed camelCase JSON."""
        return json.dumps(report.model_dump(mode="json", by_alias=True), indent=2)

    def to_csv(self, report: ExtractedReport) -> str:
        """
        One section per populated category, then a METADATA section.

        Each section is a title row, a header row and one row per record,
        followed by a blank row.
        """
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")

        for title, _sheet, attribute, columns in SECTIONS:
            records = getattr(report, attribute)
            if not records:
                continue
            writer.writerow([title])
            writer.writerow([header for header, _ in columns])
            for record in records:
                writer.writerow([getter(record) for _, getter in columns])
            writer.writerow([])

        writer.writerow(["METADATA"])
        writer.writerow(["Property", "Value"])
        writer.writerows(_metadata_rows(report))

        return buffer.getvalue()

    def to_excel(self, report: ExtractedReport) -> bytes:
        """Workbook with Summary, one sheet per populated category, and Metadata."""
        workbook = Workbook()
        summary_sheet = workbook.active
        summary_sheet.title = "Summary"
        self._fill_sheet(summary_sheet, ["Metric", "Value"], _summary_rows(report))

        for _title, sheet_name, attribute, columns in SECTIONS:
            records = getattr(report, attribute)
            if not records:
                continue
            sheet = workbook.create_sheet(sheet_name)
            rows = [[getter(record) for _, getter in columns] for record in records]
            self._fill_sheet(sheet, [header for header, _ in columns], rows)

        metadata_sheet = workbook.create_sheet("Metadata")
        self._fill_sheet(metadata_sheet, ["Property", "Value"], _metadata_rows(report))

        buffer = io.BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    @staticmethod
    def _fill_sheet(sheet: Any, headers: list[str], rows: list[Any]) -> None:
        sheet.append(headers)
        for cell in sheet[1]:
            cell.font = Font(bold=True)
        for row in rows:
            sheet.append(list(row))


# Singleton instance for dependency injection
_export_service: ExportService | None = None


def get_export_service() -> ExportService:
    """Get or create the export service singleton."""
    global _export_service
    if _export_service is None:
        _export_service = ExportService()
    return _export_service
