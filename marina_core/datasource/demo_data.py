# =============================================================================
# marina_core/datasource/demo_data.py
# Static demo dataset served in mock mode
# =============================================================================
"""
Deterministic sample records for demo mode. Only the shape matters to the
rest of the system; values are generated from the row index so every run
shows the same marina.
"""

from __future__ import annotations
from datetime import date, datetime, timedelta
from typing import Any, Dict, List

DEMO_ROWS = 25
DEMO_MARINA_ID = "marina-1"

CONTRACT_STATUSES = ["ACTIVE", "ACTIVE", "ACTIVE", "PENDING", "EXPIRED"]
INVOICE_STATUSES = ["PAID", "PAID", "PAID", "SENT", "OVERDUE"]
BOAT_STATUSES = ["ACTIVE", "ACTIVE", "ACTIVE", "INACTIVE", "MAINTENANCE"]
BERTH_STATUSES = ["OCCUPIED", "OCCUPIED", "OCCUPIED", "AVAILABLE", "MAINTENANCE"]
WORK_ORDER_STATUSES = ["COMPLETED", "COMPLETED", "COMPLETED", "IN_PROGRESS", "PENDING"]
PRIORITIES = ["LOW", "MEDIUM", "HIGH"]

_ANCHOR = date(2024, 1, 1)


def _day(offset: int) -> str:
    return (_ANCHOR + timedelta(days=offset)).isoformat()


def demo_contracts() -> List[Dict[str, Any]]:
    return [
        {
            "id": f"contract-{i}",
            "contractNumber": f"CON-{i:03d}",
            "startDate": _day(i * 7),
            "endDate": _day(365 + i * 7),
            "status": CONTRACT_STATUSES[(i - 1) % 5],
            "monthlyRate": 500 + (i * 37) % 1000,
            "customerId": f"customer-{i}",
            "boatId": f"boat-{i}",
            "berthId": f"berth-{i}",
            "customer": {
                "id": f"customer-{i}",
                "firstName": f"Customer{i}",
                "lastName": "Smith",
                "email": f"customer{i}@example.com",
            },
            "boat": {"id": f"boat-{i}", "name": f"Boat {i}", "registration": f"REG-{i:03d}"},
            "berth": {"id": f"berth-{i}", "berthNumber": f"A-{i}"},
        }
        for i in range(1, DEMO_ROWS + 1)
    ]


def demo_invoices() -> List[Dict[str, Any]]:
    rows = []
    for i in range(1, DEMO_ROWS + 1):
        subtotal = 500 + (i * 53) % 2000
        tax = round(subtotal * 0.2, 2)
        rows.append({
            "id": f"invoice-{i}",
            "invoiceNumber": f"INV-{i:03d}",
            "customerName": f"Customer {i} Smith",
            "customerEmail": f"customer{i}@example.com",
            "issueDate": _day(i * 3),
            "dueDate": _day(i * 3 + 30),
            "status": INVOICE_STATUSES[(i - 1) % 5],
            "subtotal": subtotal,
            "tax": tax,
            "total": subtotal + tax,
            "description": f"Monthly berth rental for {i} month{'' if i == 1 else 's'}",
        })
    return rows


def demo_boats() -> List[Dict[str, Any]]:
    return [
        {
            "id": f"boat-{i}",
            "name": f"Boat {i}",
            "registration": f"REG-{i:03d}",
            "length": 20 + (i * 7) % 30,
            "beam": 5 + (i * 3) % 10,
            "draft": 1 + i % 3,
            "ownerId": f"customer-{i}",
            "marinaId": DEMO_MARINA_ID,
            "status": BOAT_STATUSES[(i - 1) % 5],
            "isActive": BOAT_STATUSES[(i - 1) % 5] != "INACTIVE",
        }
        for i in range(1, DEMO_ROWS + 1)
    ]


def demo_berths() -> List[Dict[str, Any]]:
    rows = []
    for i in range(1, DEMO_ROWS + 1):
        status = BERTH_STATUSES[(i - 1) % 5]
        occupied = status == "OCCUPIED"
        rows.append({
            "id": f"berth-{i}",
            "berthNumber": f"A-{i}",
            "length": 30 + (i * 3) % 20,
            "beam": 8 + (i * 5) % 12,
            "depth": round(2 + (i % 30) / 10, 1),
            "status": status,
            "monthlyRate": 500 + (i * 41) % 1000,
            "isAvailable": status == "AVAILABLE",
            "boatName": f"Boat {i}" if occupied else None,
            "contractStatus": "ACTIVE" if occupied else None,
        })
    return rows


def demo_work_orders() -> List[Dict[str, Any]]:
    return [
        {
            "id": f"workorder-{i}",
            "workOrderNumber": f"WO-{i:03d}",
            "customerName": f"Customer {i} Smith",
            "boatName": f"Boat {i}",
            "description": f"Maintenance work for {i} item{'' if i == 1 else 's'}",
            "status": WORK_ORDER_STATUSES[(i - 1) % 5],
            "priority": PRIORITIES[(i - 1) % 3],
            "estimatedCost": 200 + (i * 61) % 1000,
            "startDate": _day(i),
            "completionDate": _day(i + 5) if i % 3 == 1 else None,
        }
        for i in range(1, DEMO_ROWS + 1)
    ]


DEMO_DASHBOARD_STATS: Dict[str, Any] = {
    "contracts": {"total": 25, "active": 20, "pending": 3, "expired": 2},
    "invoices": {"total": 25, "paid": 22, "pending": 2, "overdue": 1},
    "bookings": {"total": 25, "active": 23},
    "payments": {"total": 25, "completed": 23, "pending": 2, "failed": 0},
    "owners": {"total": 25, "withContracts": 22},
    "boats": {"total": 25, "active": 20, "inactive": 5},
    "berths": {"total": 25, "occupied": 15, "available": 10},
    "workOrders": {"total": 25, "completed": 15, "inProgress": 5, "pending": 5},
    "financial": {"totalRevenue": 125000, "monthlyRevenue": 18500, "outstandingAmount": 4200},
}

DEMO_USER_PROFILE: Dict[str, Any] = {
    "id": "demo-user",
    "email": "demo@marina.com",
    "firstName": "John",
    "lastName": "Doe",
    "phone": "+44 20 7946 0958",
    "address": "123 Marina Way",
    "city": "Portsmouth",
    "county": "Hampshire",
    "postcode": "PO1 1AA",
    "country": "United Kingdom",
    "roles": [{"role": "ADMIN"}, {"role": "STAFF_FRONT_DESK"}],
    "preferences": {
        "language": "en-GB",
        "timezone": "Europe/London",
        "notifications": {"email": True, "sms": False, "push": True},
    },
}

DEMO_PENDING_OPERATIONS: List[Dict[str, Any]] = [
    {
        "id": 1,
        "operationType": "CONTRACT_CREATION",
        "status": "PENDING",
        "priority": "HIGH",
        "createdAt": "2024-01-15T14:30:00Z",
        "metadata": {"title": "New Contract - Blue Horizon", "attempts": 2, "maxAttempts": 5},
    },
    {
        "id": 2,
        "operationType": "INVOICE_UPDATE",
        "status": "PENDING",
        "priority": "MEDIUM",
        "createdAt": "2024-01-15T13:45:00Z",
        "metadata": {"title": "Invoice Payment - Invoice #2024-001", "attempts": 1, "maxAttempts": 3},
    },
    {
        "id": 3,
        "operationType": "WORK_ORDER_CREATION",
        "status": "FAILED",
        "priority": "HIGH",
        "createdAt": "2024-01-15T12:20:00Z",
        "metadata": {"title": "Maintenance Request - Electrical Issue", "attempts": 3, "maxAttempts": 3},
    },
]

DEMO_NOTIFICATIONS: List[Dict[str, Any]] = [
    {
        "id": "notification-1",
        "type": "SYNC_COMPLETE",
        "title": "Sync completed",
        "message": "12 records synchronised with the marina office",
        "priority": "INFO",
        "timestamp": "2024-01-15T14:35:00Z",
        "status": "unread",
    },
    {
        "id": "notification-2",
        "type": "OPERATION_FAILED",
        "title": "Work order failed",
        "message": "Maintenance Request - Electrical Issue reached its retry limit",
        "priority": "HIGH",
        "timestamp": "2024-01-15T13:00:00Z",
        "status": "unread",
    },
]

DEMO_RECENT_ACTIVITY: List[Dict[str, Any]] = [
    {"id": "1", "type": "contract_renewed", "title": "Contract Renewed",
     "description": "Annual contract renewed for Berth A-15", "priority": "low"},
    {"id": "2", "type": "payment_received", "title": "Payment Received",
     "description": "Monthly payment received from John Smith", "priority": "medium"},
    {"id": "3", "type": "work_order_completed", "title": "Work Order Completed",
     "description": "Engine maintenance completed for vessel Sea Breeze", "priority": "high"},
]


def demo_sync_status(now: datetime, interval_minutes: int = 30) -> Dict[str, Any]:
    """Sync status as the demo backend reports it (always online)."""
    return {
        "isOnline": True,
        "lastSync": now.isoformat(),
        "nextSync": (now + timedelta(minutes=interval_minutes)).isoformat(),
        "syncInterval": interval_minutes,
        "pendingOperations": 2,
        "failedOperations": 1,
        "totalOperations": 15,
        "syncProgress": 80,
        "isSyncing": False,
        "connectionQuality": "EXCELLENT",
        "serverLatency": 25,
    }


def _rate(part: int, whole: int) -> float:
    return (part / whole) * 100 if whole > 0 else 0.0


def demo_marina_overview(now: datetime) -> Dict[str, Any]:
    """Marina overview derived from the demo dashboard stats."""
    stats = DEMO_DASHBOARD_STATS
    occupancy = _rate(stats["berths"]["occupied"], stats["berths"]["total"])
    return {
        "generatedAt": now.isoformat(),
        "marinaId": DEMO_MARINA_ID,
        "summary": {
            "totalRevenue": stats["financial"]["totalRevenue"],
            "monthlyRevenue": stats["financial"]["monthlyRevenue"],
            "outstandingAmount": stats["financial"]["outstandingAmount"],
            "totalBoats": stats["boats"]["total"],
            "totalBerths": stats["berths"]["total"],
            "totalCustomers": stats["owners"]["total"],
            "occupancyRate": occupancy,
        },
        "boats": dict(stats["boats"], utilization=_rate(stats["boats"]["active"], stats["boats"]["total"])),
        "contracts": dict(
            stats["contracts"],
            renewalRate=_rate(stats["contracts"]["active"], stats["contracts"]["total"]),
        ),
        "berths": dict(stats["berths"], occupancyRate=occupancy),
        "customers": dict(
            stats["owners"],
            engagementRate=_rate(stats["owners"]["withContracts"], stats["owners"]["total"]),
        ),
        "maintenance": dict(
            stats["workOrders"],
            completionRate=_rate(stats["workOrders"]["completed"], stats["workOrders"]["total"]),
        ),
    }
