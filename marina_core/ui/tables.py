# =============================================================================
# marina_core/ui/tables.py
# DataFrame builders for feed and record tables
# =============================================================================
"""
Flattens provider payloads into pandas DataFrames for ``st.dataframe``.
Kept free of Streamlit so the shaping can be unit tested.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

OPERATION_COLUMNS = ["id", "operationType", "title", "status", "priority", "attempts", "createdAt", "fallback"]
NOTIFICATION_COLUMNS = ["id", "type", "title", "message", "priority", "status", "timestamp", "fallback"]

RECORD_COLUMNS = {
    "contracts": ["contractNumber", "status", "startDate", "endDate", "monthlyRate"],
    "invoices": ["invoiceNumber", "customerName", "status", "issueDate", "dueDate", "total"],
    "boats": ["name", "registration", "length", "beam", "draft", "status"],
    "berths": ["berthNumber", "status", "length", "beam", "depth", "monthlyRate", "boatName"],
    "work_orders": ["workOrderNumber", "customerName", "boatName", "status", "priority", "estimatedCost"],
}


def operations_frame(operations: Optional[Sequence[Dict[str, Any]]]) -> pd.DataFrame:
    """One row per pending operation; metadata title/attempts are lifted out."""
    rows = []
    for op in operations or []:
        metadata = op.get("metadata") or {}
        attempts = metadata.get("attempts")
        max_attempts = metadata.get("maxAttempts")
        rows.append({
            "id": op.get("id"),
            "operationType": op.get("operationType") or op.get("type"),
            "title": metadata.get("title") or op.get("description"),
            "status": op.get("status"),
            "priority": op.get("priority"),
            "attempts": f"{attempts}/{max_attempts}" if attempts is not None and max_attempts else attempts,
            "createdAt": op.get("createdAt") or op.get("timestamp"),
            "fallback": bool(op.get("is_fallback")),
        })
    return pd.DataFrame(rows, columns=OPERATION_COLUMNS)


def notifications_frame(notifications: Optional[Sequence[Dict[str, Any]]]) -> pd.DataFrame:
    rows = [
        {
            "id": n.get("id"),
            "type": n.get("type"),
            "title": n.get("title"),
            "message": n.get("message"),
            "priority": n.get("priority"),
            "status": n.get("status"),
            "timestamp": n.get("timestamp"),
            "fallback": bool(n.get("is_fallback")),
        }
        for n in notifications or []
    ]
    return pd.DataFrame(rows, columns=NOTIFICATION_COLUMNS)


def records_frame(data_type: str, records: Optional[List[Dict[str, Any]]]) -> pd.DataFrame:
    """
    Tabulate a record list with the preferred columns first.

    Unknown data types keep every column the records carry.
    """
    frame = pd.DataFrame(records or [])
    preferred = RECORD_COLUMNS.get(data_type)
    if not preferred:
        return frame
    if frame.empty:
        return pd.DataFrame(columns=preferred)
    present = [c for c in preferred if c in frame.columns]
    return frame[present]


def stats_frame(stats: Dict[str, Any]) -> pd.DataFrame:
    """Dashboard stats as a (section, metric, value) long table."""
    rows = [
        {"section": section, "metric": metric, "value": value}
        for section, values in (stats or {}).items()
        if isinstance(values, dict)
        for metric, value in values.items()
    ]
    return pd.DataFrame(rows, columns=["section", "metric", "value"])
