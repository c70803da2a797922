"""
phonescan/parsers/sms_parser.py
Normalizes `content://sms/...` query output into Message records
and classifies each body.

Direction is binary: type code '1' is received, every other code
(including ones Android defines as draft/outbox/failed) is sent.
This differs from the call log, which has an explicit 'unknown'.
"""

import logging
from typing import List

from phonescan.detectors.keyword_detector import classify
from phonescan.models.record import Message
from phonescan.parsers.field_parser import SMS_FIELDS, format_epoch_ms, parse_fields

logger = logging.getLogger(__name__)

SMS_RECEIVED = 'received'
SMS_SENT     = 'sent'


def sms_direction(type_code: str) -> str:
    return SMS_RECEIVED if type_code == '1' else SMS_SENT


def parse_sms_data(data: str) -> List[Message]:
    """
    Parse raw SMS query text. One Message per non-blank line.
    Contact names are not resolved here; see resolve_contacts().
    """
    messages: List[Message] = []

    for item in parse_fields(data, SMS_FIELDS):
        body  = item.get('body')
        label = classify(body)
        messages.append(Message(
            address        = item.get('address'),
            date           = format_epoch_ms(item.get('date')),
            direction      = sms_direction(item['type']) if item.get('type') else None,
            body           = body,
            is_suspicious  = label.is_suspicious,
            category       = label.category,
        ))

    flagged = sum(1 for m in messages if m.is_suspicious)
    logger.info(f"Parsed {len(messages)} SMS ({flagged} suspicious)")
    return messages
