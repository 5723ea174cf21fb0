"""Excel export functionality."""

from __future__ import annotations
from io import BytesIO
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
import streamlit as st

from deals.constants import METRIC_CATEGORY_LABELS, PRODUCT_FIELDS
from services.utils import slugify

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# (deal field, column header) in sheet order
DEAL_COLUMNS: List[Tuple[str, str]] = [
    ("id", "Deal #"),
    ("saleDate", "Sale Date"),
    ("customerName", "Customer"),
    ("stockNumber", "Stock #"),
    ("vinLast8", "VIN (last 8)"),
    ("vehicleType", "Vehicle Type"),
    ("vehicleDescription", "Vehicle"),
    ("dealType", "Deal Type"),
    ("lender", "Lender"),
    ("salesperson", "Salesperson"),
    ("status", "Status"),
    ("frontEndGross", "Front End Gross"),
    ("reserveFlat", "Reserve / Flat"),
] + [(field, label) for field, label in PRODUCT_FIELDS] + [
    ("backEndGross", "Back End Gross"),
    ("totalGross", "Total Gross"),
    ("notes", "Notes"),
]


def deals_to_frame(deals: List[Dict[str, Any]]):
    """Deals as a DataFrame with display column headers."""
    import pandas as pd
    
    rows = [
        {header: deal.get(field, "") for field, header in DEAL_COLUMNS}
        for deal in deals or []
    ]
    return pd.DataFrame(rows, columns=[header for _, header in DEAL_COLUMNS])


def summary_rows(
    metrics: Dict[str, Any],
    pay: Optional[Dict[str, Any]] = None,
    period: str = "",
) -> List[Tuple[str, Any]]:
    """Flatten metrics (and optionally pay) into (item, value) rows."""
    rows: List[Tuple[str, Any]] = []
    if period:
        rows.append(("Period", period))
    rows += [
        ("Deals Processed", metrics.get("deals_processed", 0)),
        ("Total Back-End Revenue", round(metrics.get("total_revenue", 0.0), 2)),
        ("PVR", round(metrics.get("pvr", 0.0), 2)),
        ("Products per Deal", round(metrics.get("products_per_deal", 0.0), 2)),
    ]
    for deal_type, count in (metrics.get("deal_types") or {}).items():
        rows.append((f"{deal_type} Deals", count))
    for category, data in (metrics.get("products") or {}).items():
        label = METRIC_CATEGORY_LABELS.get(category, category)
        rows.append((f"{label} Penetration %", data.get("penetration", 0)))
        rows.append((f"{label} Avg Profit", data.get("average_profit", 0)))
    if pay:
        rows += [
            ("Funded Deals", pay.get("funded_deals", 0)),
            ("Commission", round(pay.get("commission_earnings", 0.0), 2)),
            ("Base Pay", round(pay.get("base_earnings", 0.0), 2)),
            ("Product Bonuses", round(pay.get("total_bonuses", 0.0), 2)),
            ("Estimated Pay", round(pay.get("estimated_pay", 0.0), 2)),
        ]
    return rows


def build_excel_bytes(
    deals: List[Dict[str, Any]],
    metrics: Dict[str, Any],
    pay: Optional[Dict[str, Any]] = None,
    period: str = "",
) -> bytes:
    """Workbook with a Deals sheet and a Summary sheet."""
    import pandas as pd
    
    buf = BytesIO()
    with pd.ExcelWriter(buf, engine="xlsxwriter") as xw:
        deals_to_frame(deals).to_excel(xw, index=False, sheet_name="Deals")
        ws = xw.sheets["Deals"]
        ws.set_column(0, len(DEAL_COLUMNS) - 1, 16)
        ws.freeze_panes(1, 0)
        
        summary = pd.DataFrame(
            [{"Item": k, "Value": ("" if v in (None, "") else v)} for k, v in summary_rows(metrics, pay, period)]
        )
        summary.to_excel(xw, index=False, sheet_name="Summary")
        ws = xw.sheets["Summary"]
        ws.set_column(0, 0, 32)
        ws.set_column(1, 1, 18)
    return buf.getvalue()


def export_deals_to_excel(
    deals: List[Dict[str, Any]],
    metrics: Dict[str, Any],
    pay: Optional[Dict[str, Any]] = None,
    period: str = "",
) -> None:
    """Render Excel download button."""
    try:
        import pandas  # noqa: F401
    except ImportError:
        st.caption("Install pandas for Excel export.")
        return
    
    stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    period_for_file = slugify(period or "deals")
    
    st.download_button(
        "Download Excel",
        data=build_excel_bytes(deals, metrics, pay, period),
        file_name=f"deal_log_{period_for_file}_{stamp}.xlsx",
        mime=XLSX_MIME,
        use_container_width=True,
    )
