"""Export of the application collection: raw JSON and a printable HTML report."""

import json
from datetime import datetime
from html import escape
from pathlib import Path
from typing import Optional, Sequence

from ..utils.config import config
from .kpi import summarize
from .models import STATUS_ORDER, ApplicationRecord

REPORT_STYLE = """\
    body{font:14px/1.5 -apple-system,BlinkMacSystemFont,Segoe UI,Roboto,Inter,Arial,sans-serif;color:#111;margin:24px}
    h1{font-size:20px;margin:0 0 6px 0}
    .meta{color:#555;margin:0 0 16px 0}
    table{width:100%;border-collapse:collapse;margin-top:12px}
    th,td{border:1px solid #ddd;padding:8px;text-align:left}
    th{background:#f5f5f7;text-transform:uppercase;font-size:12px;letter-spacing:.04em}
    .kpis{display:flex;gap:8px;flex-wrap:wrap;margin:8px 0 16px}
    .kpi{border:1px solid #eee;border-radius:8px;padding:8px 10px}
    @media print { @page { size: A4; margin: 16mm } }"""

EMPTY_ROW = '<tr><td colspan="3">No applications</td></tr>'


def _deliver(output: str, out: Optional[Path]) -> str:
    if out:
        out = Path(out)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(output, encoding="utf-8")
        return f"Exported to {out}"
    return output


def export_json(records: Sequence[ApplicationRecord], out: Optional[Path] = None) -> str:
    """
    Export all records as a JSON list, in collection order.

    Args:
        records: Full record collection
        out: Output file path (if None, returns as string)

    Returns:
        JSON text (if out is None) or a confirmation after writing the file
    """
    output = json.dumps([r.to_storage() for r in records], indent=2, ensure_ascii=False)
    return _deliver(output, out)


def render_report(
    records: Sequence[ApplicationRecord],
    generated_at: Optional[datetime] = None,
    title: Optional[str] = None
) -> str:
    """Build the printable HTML report.

    Contains the generation time, the KPI summary for every status and a
    table of all records. Every text field is HTML-escaped.
    """
    generated_at = generated_at or datetime.now()
    title = title or config.get('tracker.export.report_title', 'Job Applications Report')
    kpis = summarize(records)

    kpi_cards = [f'    <div class="kpi"><strong>Total:</strong> {kpis.total}</div>']
    for status in STATUS_ORDER:
        kpi_cards.append(
            f'    <div class="kpi"><strong>{escape(status.value)}:</strong> '
            f'{kpis.counts[status]} ({kpis.percentages[status]}%)</div>'
        )

    rows = "".join(
        "\n      <tr>"
        f"<td>{escape(r.title)}</td>"
        f"<td>{escape(r.company)}</td>"
        f"<td>{escape(r.status.value)}</td>"
        "</tr>"
        for r in records
    )

    return f"""<!doctype html>
<html>
<head>
  <meta charset="utf-8">
  <title>{escape(title)}</title>
  <style>
{REPORT_STYLE}
  </style>
</head>
<body>
  <h1>{escape(title)}</h1>
  <p class="meta">Generated at: {generated_at.strftime('%d/%m/%Y %H:%M:%S')}</p>
  <div class="kpis">
{chr(10).join(kpi_cards)}
  </div>
  <table>
    <thead><tr><th>Title</th><th>Company</th><th>Status</th></tr></thead>
    <tbody>{rows or EMPTY_ROW}
    </tbody>
  </table>
  <script>window.print();</script>
</body>
</html>
"""


def export_report(
    records: Sequence[ApplicationRecord],
    out: Optional[Path] = None,
    generated_at: Optional[datetime] = None
) -> str:
    """
    Export the printable HTML report.

    Args:
        records: Full record collection
        out: Output file path (if None, returns as string)
        generated_at: Timestamp shown in the report (defaults to now)

    Returns:
        HTML text (if out is None) or a confirmation after writing the file
    """
    return _deliver(render_report(records, generated_at=generated_at), out)
