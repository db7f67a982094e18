"""
Utility module for common Supabase table operations.
Provides sibling order computation, batched upserts and timestamp helpers
shared by the course, module and lesson services.
"""
import logging
from datetime import datetime, timezone
from typing import List, Dict, Any, Optional
from supabase import Client

# Initialize logging
logger = logging.getLogger(__name__)


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string, the format the backend stores."""
    return datetime.now(timezone.utc).isoformat()


def next_order_index(
    supabase_client: Client,
    table: str,
    parent_field: str,
    parent_id: str
) -> int:
    """
    Compute the order index for a new child row.

    Reads the highest ``order`` among the rows sharing ``parent_id`` and
    returns it plus one, or 1 when the parent has no children yet. This is a
    read-then-write: two concurrent callers can receive the same value.

    Args:
        supabase_client (Client): Supabase client instance
        table (str): Child table, e.g. ``modules`` or ``lessons``
        parent_field (str): Foreign key column, e.g. ``course_id``
        parent_id (str): Parent row id

    Returns:
        int: Next order index
    """
    response = supabase_client.table(table)\
        .select('order')\
        .eq(parent_field, parent_id)\
        .order('order', desc=True)\
        .limit(1)\
        .execute()

    return compute_next_order([row.get('order') for row in (response.data or [])])


def compute_next_order(orders: List[Optional[int]]) -> int:
    """Return ``max(orders) + 1``, or 1 when there are no (non-null) orders."""
    present = [order for order in orders if order is not None]
    return max(present) + 1 if present else 1


def bulk_upsert(
    supabase_client: Client,
    table: str,
    records: List[Dict[str, Any]],
    id_field: str = "id",
    batch_size: int = 100
) -> List[Dict[str, Any]]:
    """
    Insert or update multiple records in a Supabase table in batches.

    Conflicts are resolved on ``id_field``; the last write wins. Any batch
    failure propagates to the caller, so earlier batches may already be
    applied.

    Args:
        supabase_client (Client): Supabase client instance
        table (str): Name of the table to upsert into
        records (List[Dict[str, Any]]): List of records to upsert
        id_field (str): Conflict target column
        batch_size (int): Number of records to upsert in each batch

    Returns:
        List[Dict[str, Any]]: Rows returned by the backend
    """
    if not records:
        logger.warning(f"No records provided for bulk upsert into {table}")
        return []

    upserted = []
    for i in range(0, len(records), batch_size):
        batch = records[i:i+batch_size]
        response = supabase_client.table(table).upsert(batch, on_conflict=id_field).execute()

        if response.data:
            upserted.extend(response.data)
            logger.info(f"Successfully upserted {len(response.data)} records into {table}")
        else:
            logger.warning(f"No data returned from upsert operation for batch {i//batch_size + 1}")

    return upserted


def order_updates(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Turn ``[{id, order}, ...]`` into upsert rows stamped with ``updated_at``."""
    now = utc_now_iso()
    return [
        {'id': item['id'], 'order': item['order'], 'updated_at': now}
        for item in items
    ]


def with_updated_at(updates: Dict[str, Any]) -> Dict[str, Any]:
    data = dict(updates)
    data['updated_at'] = utc_now_iso()
    return data


def first_row(response) -> Optional[Dict[str, Any]]:
    data = response.data
    if isinstance(data, list):
        return data[0] if data else None
    return data
