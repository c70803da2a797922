"""
tests/conftest.py
Shared fixtures. Synthetic `content query` output; no device needed.
"""

from datetime import datetime
from typing import Dict

import pytest

from phonescan.exceptions import ExecutionError
from phonescan.providers.base import (
    CALL_LOG, CONTACTS, SMS_INBOX, SMS_SENT, QueryDescriptor, RawTextProvider,
)
from phonescan.store.sqlite_store import SQLiteStore


def epoch_ms(*args) -> int:
    """Local datetime → epoch ms, so formatted dates are timezone-independent."""
    return int(datetime(*args).timestamp() * 1000)


INBOX_TEXT = (
    f"Row: 0 _id=1, address=+15550001, date={epoch_ms(2024, 3, 1, 9, 0, 0)}, type=1, "
    f"body=You won a cash prize, read=1\n"
    f"Row: 1 _id=2, address=+15550002, date={epoch_ms(2024, 3, 1, 18, 30, 0)}, type=1, "
    f"body=See you at lunch tomorrow, read=1\n"
    f"\n"
)

SENT_TEXT = (
    f"Row: 0 _id=3, address=+15550001, date={epoch_ms(2024, 3, 2, 8, 15, 0)}, type=2, "
    f"body=Check www.example.com, read=1\n"
)

CALLS_TEXT = (
    f"Row: 0 _id=1, number=+15550001, date={epoch_ms(2024, 3, 1, 10, 0, 0)}, duration=125, type=1\n"
    f"Row: 1 _id=2, number=+15550001, date={epoch_ms(2024, 3, 1, 11, 0, 0)}, duration=0, type=3\n"
    f"Row: 2 _id=3, number=+15550009, date={epoch_ms(2024, 3, 2, 12, 0, 0)}, duration=60, type=2\n"
)

CONTACTS_TEXT = (
    "Row: 0 _id=1, display_name=Alice, number=+15550001\n"
    "Row: 1 _id=2, display_name=Carol, number=+15550003\n"
)


class FakeProvider(RawTextProvider):
    """Returns canned text per query; a query mapped to an exception raises it."""

    def __init__(self, responses: Dict[str, object] = None, model: str = 'Pixel 7 Pro'):
        self.responses = responses if responses is not None else {
            SMS_INBOX.name: INBOX_TEXT,
            SMS_SENT.name:  SENT_TEXT,
            CALL_LOG.name:  CALLS_TEXT,
            CONTACTS.name:  CONTACTS_TEXT,
        }
        self.model = model
        self.calls = []

    def fetch(self, query: QueryDescriptor) -> str:
        self.calls.append(query.name)
        value = self.responses.get(query.name, '')
        if isinstance(value, Exception):
            raise value
        return value

    def device_model(self) -> str:
        if isinstance(self.model, Exception):
            raise self.model
        return self.model


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def failing_provider():
    return FakeProvider(
        responses={name: ExecutionError('device offline')
                   for name in (SMS_INBOX.name, SMS_SENT.name, CALL_LOG.name, CONTACTS.name)},
        model=ExecutionError('device offline'),
    )


@pytest.fixture
def store(tmp_path):
    return SQLiteStore(tmp_path / 'test.db')
