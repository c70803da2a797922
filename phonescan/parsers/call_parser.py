"""
phonescan/parsers/call_parser.py
Normalizes `content://call_log/calls/` query output into CallRecords.
"""

import logging
from typing import List

from phonescan.models.record import CallRecord
from phonescan.parsers.field_parser import CALL_LOG_FIELDS, format_epoch_ms, parse_fields

logger = logging.getLogger(__name__)

CALL_TYPE = {
    '1': 'incoming',
    '2': 'outgoing',
    '3': 'missed',
}
CALL_UNKNOWN = 'unknown'


def call_direction(type_code: str) -> str:
    return CALL_TYPE.get(type_code, CALL_UNKNOWN)


def format_duration(seconds: int) -> str:
    """125 → '2m 5s'. No hour rollover: 3600 → '60m 0s'."""
    minutes, secs = divmod(seconds, 60)
    return f"{minutes}m {secs}s"


def _duration(value):
    if not value:
        return value
    try:
        return format_duration(int(value))
    except ValueError:
        return value


def parse_call_log_data(data: str) -> List[CallRecord]:
    records = [
        CallRecord(
            number     = item.get('number'),
            date       = format_epoch_ms(item.get('date')),
            duration   = _duration(item.get('duration')),
            direction  = call_direction(item['type']) if item.get('type') else None,
        )
        for item in parse_fields(data, CALL_LOG_FIELDS)
    ]
    logger.info(f"Parsed {len(records)} call records")
    return records
