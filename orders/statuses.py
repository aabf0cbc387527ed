"""
Order status codes and how they are displayed.

Labels and colours only: nothing here enforces which status may follow
which. Colours are CSS utility tokens the console uses for status badges.
"""

from typing import Dict, NamedTuple, Optional


class StatusDisplay(NamedTuple):
    label: str
    color: str


ORDER_STATUSES = (
    'pending_payment',
    'processing',
    'shipped',
    'on_hold',
    'completed',
    'cancelled',
    'refunded',
    'failed',
)

ORDER_STATUS_CONFIG: Dict[str, StatusDisplay] = {
    'pending_payment': StatusDisplay('Pending Payment', 'bg-amber-500'),
    'processing': StatusDisplay('Processing', 'bg-blue-500'),
    'shipped': StatusDisplay('Shipped', 'bg-indigo-500'),
    'on_hold': StatusDisplay('On Hold', 'bg-purple-500'),
    'completed': StatusDisplay('Completed', 'bg-emerald-500'),
    'cancelled': StatusDisplay('Cancelled', 'bg-red-500'),
    'refunded': StatusDisplay('Refunded', 'bg-rose-600'),
    'failed': StatusDisplay('Failed', 'bg-slate-600'),
}

# Codes as they arrive from the previous storefront's order export.
LEGACY_ORDER_STATUS_CONFIG: Dict[str, StatusDisplay] = {
    'completed': StatusDisplay('Completed', 'bg-emerald-500'),
    'refunded': StatusDisplay('Refunded', 'bg-rose-500'),
    'cancelled': StatusDisplay('Cancelled', 'bg-red-500'),
    'processing': StatusDisplay('Processing', 'bg-blue-500'),
    'on-hold': StatusDisplay('On Hold', 'bg-purple-500'),
    'pending': StatusDisplay('Pending', 'bg-amber-500'),
    'failed': StatusDisplay('Failed', 'bg-slate-500'),
}

DEFAULT_STATUS_COLOR = 'bg-slate-500'
UNKNOWN_LABEL = 'Unknown'

# Pre-workflow codes still found on older native orders.
STATUS_MIGRATION_MAP: Dict[str, str] = {
    'pending': 'pending_payment',
    'paid': 'processing',
    'allocated': 'processing',
    'picking': 'processing',
    'packed': 'processing',
    'delivered': 'completed',
    'partial_refund': 'refunded',
}

ORDER_STATUS_CHOICES = [(code, ORDER_STATUS_CONFIG[code].label) for code in ORDER_STATUSES]


def humanize_status(status: Optional[str]) -> str:
    """Readable form of a raw status code: 'on_hold' -> 'on hold'."""
    if not status:
        return UNKNOWN_LABEL
    return status.replace('_', ' ').replace('-', ' ')


def get_order_status_display(status: Optional[str]) -> StatusDisplay:
    """Label and colour for a current order status, falling back to the raw code."""
    if status in ORDER_STATUS_CONFIG:
        return ORDER_STATUS_CONFIG[status]
    return StatusDisplay(humanize_status(status), DEFAULT_STATUS_COLOR)


def get_order_status_label(status: Optional[str]) -> str:
    return get_order_status_display(status).label


def get_legacy_order_status_display(status: Optional[str]) -> StatusDisplay:
    """Label and colour for an imported legacy order status (case-insensitive)."""
    key = (status or '').strip().lower()
    if key in LEGACY_ORDER_STATUS_CONFIG:
        return LEGACY_ORDER_STATUS_CONFIG[key]
    return StatusDisplay(humanize_status(status), DEFAULT_STATUS_COLOR)


def normalize_order_status(status: str) -> str:
    """Map a pre-workflow status code onto the current workflow; others pass through."""
    if status in ORDER_STATUS_CONFIG:
        return status
    return STATUS_MIGRATION_MAP.get(status, status)
