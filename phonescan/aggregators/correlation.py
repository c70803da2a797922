"""
phonescan/aggregators/correlation.py
Cross-entity statistics over stored records.

  message_volume()   - SMS count per address, busiest first
  timeline()         - per-day total / suspicious SMS counts in a date range
  correlate()        - call history for the top-N SMS addresses
  resolve_contacts() - attach contact display names to messages

NOTE ON DATES:
  Stored dates are the normalized local 'YYYY-MM-DD HH:mm:ss' strings.
  Messages whose date is missing or unparsable are left out of the
  timeline rather than failing it.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional

from phonescan.models.record import Contact, Message, RecordKind
from phonescan.store.base import RecordStore

logger = logging.getLogger(__name__)

DATE_FORMAT         = '%Y-%m-%d %H:%M:%S'
DAY_FORMAT          = '%Y-%m-%d'
DEFAULT_TOP_N       = 10
DEFAULT_TIMELINE_START = datetime(2024, 1, 1)


def parse_date(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.strptime(value, DATE_FORMAT)
    except (TypeError, ValueError):
        return None


def parse_bound(value: str, end_of_day: bool = False) -> datetime:
    """
    ISO date or datetime string → datetime bound for timeline().
    A date-only end bound covers the whole day: '2024-03-31' → 23:59:59.999999.
    Raises ValueError when the value is neither.
    """
    try:
        day = date.fromisoformat(value)
    except ValueError:
        return datetime.fromisoformat(value)
    return datetime.combine(day, time.max if end_of_day else time.min)


def _local_naive(ts: datetime) -> datetime:
    # Stored dates are naive local time; aware bounds are converted to match.
    if ts.tzinfo is not None:
        return ts.astimezone().replace(tzinfo=None)
    return ts


# ── CONTACT RESOLUTION ───────────────────────────────────────

def resolve_contacts(messages: List[Message], contacts: List[Contact]) -> List[Message]:
    """
    Set contact_name on every message: the display name of the contact
    whose number equals the message address, else None.
    Later contacts with the same number win.
    """
    names: Dict[str, Optional[str]] = {c.number: c.display_name for c in contacts}
    for msg in messages:
        msg.contact_name = names.get(msg.address)
    return messages


# ── VOLUME ───────────────────────────────────────────────────

def message_volume(store: RecordStore) -> List[Dict[str, Any]]:
    """[{'address': ..., 'totalMessages': n}, ...] sorted by count descending."""
    counts = store.group_by(RecordKind.SMS, 'address', len)
    stats  = [{'address': addr, 'totalMessages': n} for addr, n in counts.items()]
    stats.sort(key=lambda s: s['totalMessages'], reverse=True)
    return stats


# ── TIMELINE ─────────────────────────────────────────────────

def timeline(
    store:  RecordStore,
    start:  Optional[datetime] = None,
    end:    Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """
    Bucket messages dated within [start, end] by calendar day.

    Returns:
        [{'date': 'YYYY-MM-DD', 'totalMessages': n, 'suspiciousMessages': k}, ...]
        sorted ascending by date.
    """
    start = _local_naive(start or DEFAULT_TIMELINE_START)
    end   = _local_naive(end or datetime.now())

    def in_range(doc: Dict[str, Any]) -> bool:
        ts = parse_date(doc.get('date'))
        return ts is not None and start <= ts <= end

    docs = store.find_by(RecordKind.SMS, in_range)

    buckets: Dict[str, Dict[str, int]] = {}
    for doc in docs:
        day    = parse_date(doc['date']).strftime(DAY_FORMAT)
        bucket = buckets.setdefault(day, {'totalMessages': 0, 'suspiciousMessages': 0})
        bucket['totalMessages'] += 1
        if doc.get('is_suspicious') is True:
            bucket['suspiciousMessages'] += 1

    return [
        {'date': day, **counts}
        for day, counts in sorted(buckets.items())
    ]


# ── CORRELATION ──────────────────────────────────────────────

def correlate(store: RecordStore, top_n: int = DEFAULT_TOP_N) -> List[Dict[str, Any]]:
    """
    For each of the top_n busiest SMS addresses, attach every call record
    with the same number.

    A failed call-log lookup for one number yields callLogs=[] for that
    entry and does not affect the others. The volume query itself is
    not guarded: if it fails, the whole operation fails.
    """
    top = message_volume(store)[:top_n]

    results: List[Dict[str, Any]] = []
    for entry in top:
        number = entry['address']
        try:
            call_logs = store.find_by(
                RecordKind.CALL_LOG,
                lambda doc, n=number: doc.get('number') == n,
            )
        except Exception as e:
            logger.error(f"Error fetching call logs for number {number}: {e}")
            call_logs = []
        results.append({
            'number':   number,
            'smsCount': entry['totalMessages'],
            'callLogs': call_logs,
        })

    logger.info(f"Correlated {len(results)} numbers")
    return results
