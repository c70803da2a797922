"""
phonescan/parsers/field_parser.py
Turns `adb shell content query` output into allow-listed field mappings.

Input is one record per line, e.g.:
  Row: 0 _id=12, address=+15550001, date=1704067200000, type=1, body=Hi there

Values run to the next comma, so a body containing a literal comma is
truncated there. The token NULL is stored as None.
"""

import re
from datetime import datetime
from typing import Dict, Iterable, List, Optional

FIELD_PATTERN = re.compile(r'(\w+)=([^,]+)')
NULL_TOKEN    = 'NULL'

SMS_FIELDS      = ('address', 'date', 'type', 'body')
CALL_LOG_FIELDS = ('number', 'date', 'duration', 'type')
CONTACT_FIELDS  = ('display_name', 'number')


def parse_fields(data: str, allowed: Iterable[str]) -> List[Dict[str, Optional[str]]]:
    """
    Parse raw multi-line text into one mapping per non-blank line.
    Only keys in `allowed` are kept. A line with no key=value pairs
    yields an empty mapping rather than being dropped.
    """
    allowed = frozenset(allowed)
    records: List[Dict[str, Optional[str]]] = []

    for line in (data or '').split('\n'):
        if not line.strip():
            continue
        item: Dict[str, Optional[str]] = {}
        for key, value in FIELD_PATTERN.findall(line):
            if key in allowed:
                item[key] = None if value == NULL_TOKEN else value
        records.append(item)

    return records


def format_epoch_ms(value: Optional[str]) -> Optional[str]:
    """
    Epoch milliseconds → 'YYYY-MM-DD HH:mm:ss' in local time.
    Returns the input unchanged when it is absent or not an integer.
    """
    if not value:
        return value
    try:
        ts = int(value)
        return datetime.fromtimestamp(ts / 1000).strftime('%Y-%m-%d %H:%M:%S')
    except (OSError, OverflowError, ValueError):
        return value
