"""
phonescan/parsers/contact_parser.py
Contacts need no coercion beyond the allow-list.
"""

import logging
from typing import List

from phonescan.models.record import Contact
from phonescan.parsers.field_parser import CONTACT_FIELDS, parse_fields

logger = logging.getLogger(__name__)


def parse_contacts_data(data: str) -> List[Contact]:
    contacts = [
        Contact(display_name=item.get('display_name'), number=item.get('number'))
        for item in parse_fields(data, CONTACT_FIELDS)
    ]
    logger.info(f"Parsed {len(contacts)} contacts")
    return contacts
