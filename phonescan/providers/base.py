"""
phonescan/providers/base.py
Abstract raw-text provider. The pipeline asks for a query and gets back
newline-delimited key=value text; it never knows how the text was produced.
To add a new source: subclass RawTextProvider and implement fetch().
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class QueryDescriptor:
    name:  str
    uri:   str


SMS_INBOX = QueryDescriptor('sms_inbox', 'content://sms/inbox/')
SMS_SENT  = QueryDescriptor('sms_sent',  'content://sms/sent/')
CALL_LOG  = QueryDescriptor('call_log',  'content://call_log/calls/')
CONTACTS  = QueryDescriptor('contacts',  'content://contacts/phones/')


def sanitize_identifier(name: str) -> str:
    """'Pixel 7 Pro' → 'Pixel_7_Pro'. Safe as a file or database name."""
    return re.sub(r'[^a-zA-Z0-9_]', '_', name)


class RawTextProvider(ABC):
    """
    All device sources implement this interface.
    Failures raise ExecutionError; the caller does not retry.
    """

    @abstractmethod
    def fetch(self, query: QueryDescriptor) -> str:
        """Return the raw record text for `query`."""
        ...

    @abstractmethod
    def device_model(self) -> str:
        """Return the unsanitized device model string."""
        ...

    def resolve_identifier(self) -> str:
        """Sanitized device identifier, used to select the store namespace."""
        return sanitize_identifier(self.device_model().strip())
