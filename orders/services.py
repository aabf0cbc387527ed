"""
Service layer for order status changes.

Any known status may follow any other: the console lets staff correct a
status in either direction, so only the status code itself is checked.

Like the events services, every operation takes optional stores for orders
and for their status history; when omitted the Django-backed ones are used.
"""

import logging
from typing import Iterable, List, Optional

from events.store import ModelStore, RecordStore

from .models import Order, OrderStatusHistory
from .statuses import (
    ORDER_STATUSES,
    STATUS_MIGRATION_MAP,
    get_order_status_label,
    normalize_order_status,
)

logger = logging.getLogger(__name__)


def order_store() -> RecordStore:
    return ModelStore(Order)


def status_history_store() -> RecordStore:
    return ModelStore(OrderStatusHistory)


def update_order_status(
    order: Order,
    new_status: str,
    note: str = '',
    changed_by: str = '',
    store: Optional[RecordStore] = None,
    history: Optional[RecordStore] = None
) -> Order:
    """
    Change an order's status and record the change in its history.

    Args:
        order: Order to update; its status is updated in place as well
        new_status: One of ORDER_STATUSES
        note: Free-text reason shown in the order timeline
        changed_by: Who made the change
        store: RecordStore for orders
        history: RecordStore for status history entries

    Returns:
        The order as stored after the change

    Raises:
        ValueError: If new_status is not a known status
    """
    _validate_status(new_status)
    store = store or order_store()
    history = history or status_history_store()

    previous_status = order.status
    with store.atomic():
        updated = store.update(order.pk, status=new_status)
        history.create(
            order_id=order.pk,
            from_status=previous_status,
            status=new_status,
            note=note,
            changed_by=changed_by
        )
    order.status = new_status

    logger.info(
        "Order %s status %s -> %s", order.order_number, previous_status, new_status
    )
    return updated


def cancel_order(
    order: Order,
    note: str = '',
    changed_by: str = '',
    store: Optional[RecordStore] = None,
    history: Optional[RecordStore] = None
) -> Order:
    """
    Cancel an order.

    Raises:
        ValueError: If the order is already cancelled
    """
    if order.status == 'cancelled':
        raise ValueError("Order is already cancelled")

    return update_order_status(
        order, 'cancelled', note=note, changed_by=changed_by,
        store=store, history=history
    )


def bulk_update_status(
    order_ids: Iterable[int],
    new_status: str,
    note: str = '',
    changed_by: str = '',
    store: Optional[RecordStore] = None,
    history: Optional[RecordStore] = None
) -> int:
    """
    Move several orders to one status.

    Each order is updated on its own, so one failure does not undo the
    others. Ids with no matching order are ignored.

    Returns:
        Number of orders updated

    Raises:
        ValueError: If new_status is not a known status
    """
    _validate_status(new_status)
    store = store or order_store()
    if not note:
        note = f"Bulk status change to {get_order_status_label(new_status)}"

    updated = 0
    for order in store.filter(pk__in=list(order_ids)):
        update_order_status(
            order, new_status, note=note, changed_by=changed_by,
            store=store, history=history
        )
        updated += 1
    return updated


def normalize_statuses(
    changed_by: str = 'system',
    store: Optional[RecordStore] = None,
    history: Optional[RecordStore] = None
) -> int:
    """
    Rewrite pre-workflow status codes (pending, paid, delivered, ...) onto
    the current workflow, recording each change in the order history.

    Returns:
        Number of orders rewritten
    """
    store = store or order_store()
    history = history or status_history_store()

    with store.atomic():
        orders = store.filter(status__in=list(STATUS_MIGRATION_MAP))
        entries = []
        for order in orders:
            new_status = normalize_order_status(order.status)
            entries.append({
                'order_id': order.pk,
                'from_status': order.status,
                'status': new_status,
                'note': 'Status migrated to current workflow',
                'changed_by': changed_by,
            })
            store.update(order.pk, status=new_status)
        history.bulk_create(entries)

    if orders:
        logger.info("Normalized %d order status(es)", len(orders))
    return len(orders)


def get_order_history(
    order: Order,
    limit: Optional[int] = None,
    history: Optional[RecordStore] = None
) -> List[OrderStatusHistory]:
    """Status changes of an order, newest first."""
    history = history or status_history_store()
    entries = history.filter(order_id=order.pk, order_by=['-created_at', '-id'])
    if limit:
        entries = entries[:limit]
    return entries


def _validate_status(status: str) -> None:
    """Validate status is a current workflow status."""
    if status not in ORDER_STATUSES:
        raise ValueError(f"Unknown order status: {status}")
