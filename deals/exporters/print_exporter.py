"""
Printable period summary.

The page has one section per concern: overview figures, deal mix, a
product penetration table and, only when pay amounts are shown, the
estimated pay breakdown.
"""

from __future__ import annotations
from datetime import datetime
from html import escape
from typing import Any, Dict, List, Optional, Sequence, Tuple
import streamlit as st

from deals.constants import METRIC_CATEGORY_LABELS

# (heading, column headers, rows)
Section = Tuple[str, Sequence[str], List[Sequence[Any]]]


def _money(value: Any) -> str:
    return f"${float(value or 0):,.2f}"


def print_sections(
    metrics: Dict[str, Any],
    pay: Optional[Dict[str, Any]] = None,
) -> List[Section]:
    """Group metrics (and optionally pay) into printable tables."""
    sections: List[Section] = [
        ("Overview", ("Item", "Value"), [
            ("Deals Processed", metrics.get("deals_processed", 0)),
            ("Back-End Revenue", _money(metrics.get("total_revenue"))),
            ("PVR", _money(metrics.get("pvr"))),
            ("Products per Deal", f"{metrics.get('products_per_deal', 0.0):.2f}"),
        ]),
        ("Deal Mix", ("Deal Type", "Deals"), [
            (deal_type, count) for deal_type, count in (metrics.get("deal_types") or {}).items()
        ]),
        ("Product Penetration", ("Product", "Sold", "Penetration", "Avg Profit"), [
            (
                METRIC_CATEGORY_LABELS.get(category, category),
                data.get("count", 0),
                f"{data.get('penetration', 0)}%",
                _money(data.get("average_profit")),
            )
            for category, data in (metrics.get("products") or {}).items()
        ]),
    ]
    if pay:
        sections.append(("Estimated Pay", ("Item", "Amount"), [
            ("Commission", _money(pay.get("commission_earnings"))),
            ("Base Pay", _money(pay.get("base_earnings"))),
            ("VSC Bonuses", _money(pay.get("vsc_bonuses"))),
            ("GAP Bonuses", _money(pay.get("gap_bonuses"))),
            ("PPM Bonuses", _money(pay.get("ppm_bonuses"))),
            ("Estimated Pay", _money(pay.get("estimated_pay"))),
        ]))
    return sections


def _section_html(heading: str, columns: Sequence[str], rows: List[Sequence[Any]]) -> str:
    head = "".join(f"<th>{escape(str(c))}</th>" for c in columns)
    if rows:
        body = "".join(
            "<tr>" + "".join(
                f"<td{' class=num' if i else ''}>{escape(str(v))}</td>" for i, v in enumerate(row)
            ) + "</tr>"
            for row in rows
        )
    else:
        body = f"<tr><td colspan='{len(columns)}'>No data</td></tr>"
    return (
        f"<h2>{escape(heading)}</h2>"
        f"<table><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>"
    )


def generate_print_html(sections: List[Section], period: str) -> str:
    """Standalone HTML page that opens the print dialog on load."""
    stamp = datetime.now().strftime("%Y-%m-%d %H:%M")
    content = "".join(_section_html(*section) for section in sections)
    return f"""
    <html>
      <head>
        <meta charset="utf-8" />
        <title>F&amp;I Summary: {escape(period)}</title>
        <style>
          body {{ font-family: Arial, sans-serif; padding: 18px; }}
          h1 {{ font-size: 18px; margin: 0 0 4px; }}
          h2 {{ font-size: 14px; margin: 16px 0 6px; }}
          .meta {{ color:#666; font-size: 12px; }}
          table {{ width:100%; border-collapse:collapse; }}
          th, td {{ border:1px solid #ddd; padding:5px 8px; font-size:12px; }}
          th {{ background:#f5f5f5; text-align:left; }}
          td.num {{ text-align:right; }}
          @media print {{ @page {{ size: A4 portrait; margin: 12mm; }} h2 {{ break-after: avoid; }} }}
        </style>
      </head>
      <body>
        <h1>F&amp;I Performance Summary</h1>
        <div class="meta">{escape(period)} • printed {stamp}</div>
        {content}
        <script>window.onload = () => window.print();</script>
      </body>
    </html>
    """


def export_to_print(
    metrics: Dict[str, Any],
    pay: Optional[Dict[str, Any]],
    period: str,
) -> None:
    """Print button; pay is included only when given."""
    if st.button("Print Summary", use_container_width=True):
        html = generate_print_html(print_sections(metrics, pay), period)
        st.components.v1.html(html, height=0)
        st.toast("Opening print dialog…", icon="🖨️")
