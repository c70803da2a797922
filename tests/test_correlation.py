"""
tests/test_correlation.py
Volume, timeline, correlation join and contact resolution.
"""

from datetime import datetime

import pytest

from phonescan.aggregators.correlation import (
    correlate,
    message_volume,
    parse_bound,
    resolve_contacts,
    timeline,
)
from phonescan.exceptions import StoreError
from phonescan.models.record import Contact, Message, RecordKind
from phonescan.store.sqlite_store import SQLiteStore


def _sms(address, date='2024-03-01 10:00:00', suspicious=False):
    return Message(
        address=address, date=date, direction='received', body='x',
        is_suspicious=suspicious, category='fraud' if suspicious else None,
    ).to_document()


class FlakyCallLogStore(SQLiteStore):
    """Fails the Nth call-log lookup; everything else hits SQLite."""

    def __init__(self, db_path, fail_on: int):
        super().__init__(db_path)
        self.fail_on = fail_on
        self.lookups = 0

    def find_by(self, kind, predicate=None):
        if kind == RecordKind.CALL_LOG:
            self.lookups += 1
            if self.lookups == self.fail_on:
                raise StoreError('lookup failed')
        return super().find_by(kind, predicate)


# ── VOLUME ───────────────────────────────────────────────────

class TestMessageVolume:

    def test_sorted_descending(self, store):
        store.insert_all(RecordKind.SMS, [_sms('a'), _sms('b'), _sms('b'), _sms('c'), _sms('b'), _sms('c')])
        assert message_volume(store) == [
            {'address': 'b', 'totalMessages': 3},
            {'address': 'c', 'totalMessages': 2},
            {'address': 'a', 'totalMessages': 1},
        ]

    def test_empty(self, store):
        assert message_volume(store) == []


# ── TIMELINE ─────────────────────────────────────────────────

class TestTimeline:

    def test_daily_buckets_ascending(self, store):
        store.insert_all(RecordKind.SMS, [
            _sms('a', '2024-03-02 09:00:00'),
            _sms('a', '2024-03-01 08:00:00', suspicious=True),
            _sms('b', '2024-03-01 23:59:59'),
        ])
        result = timeline(store, datetime(2024, 1, 1), datetime(2024, 12, 31))
        assert result == [
            {'date': '2024-03-01', 'totalMessages': 2, 'suspiciousMessages': 1},
            {'date': '2024-03-02', 'totalMessages': 1, 'suspiciousMessages': 0},
        ]

    def test_range_filter_inclusive(self, store):
        store.insert_all(RecordKind.SMS, [
            _sms('a', '2023-12-31 23:59:59'),
            _sms('a', '2024-01-01 00:00:00'),
            _sms('a', '2024-02-01 00:00:00'),
            _sms('a', '2024-02-01 00:00:01'),
        ])
        result = timeline(store, datetime(2024, 1, 1), datetime(2024, 2, 1))
        assert [r['date'] for r in result] == ['2024-01-01', '2024-02-01']
        assert sum(r['totalMessages'] for r in result) == 2

    def test_undated_messages_skipped(self, store):
        store.insert_all(RecordKind.SMS, [_sms('a', None), _sms('a', 'garbage'), _sms('a', '2024-05-05 10:00:00')])
        result = timeline(store, datetime(2024, 1, 1), datetime(2024, 12, 31))
        assert result == [{'date': '2024-05-05', 'totalMessages': 1, 'suspiciousMessages': 0}]

    def test_default_range_starts_2024(self, store):
        store.insert_all(RecordKind.SMS, [_sms('a', '2023-06-01 10:00:00'), _sms('a', '2024-06-01 10:00:00')])
        assert [r['date'] for r in timeline(store)] == ['2024-06-01']


# ── CORRELATION ──────────────────────────────────────────────

class TestCorrelate:

    def test_joins_call_logs_by_number(self, store):
        store.insert_all(RecordKind.SMS, [_sms('+1'), _sms('+1'), _sms('+2')])
        store.insert_all(RecordKind.CALL_LOG, [
            {'number': '+1', 'duration': '1m 0s'},
            {'number': '+3', 'duration': '0m 5s'},
        ])
        result = correlate(store)
        assert result[0] == {'number': '+1', 'smsCount': 2, 'callLogs': [{'number': '+1', 'duration': '1m 0s'}]}
        assert result[1] == {'number': '+2', 'smsCount': 1, 'callLogs': []}

    def test_top_n_limit(self, store):
        store.insert_all(RecordKind.SMS, [_sms(f"+{i}") for i in range(15)])
        assert len(correlate(store)) == 10
        assert len(correlate(store, top_n=3)) == 3

    def test_partial_failure_keeps_all_entries(self, tmp_path):
        flaky = FlakyCallLogStore(tmp_path / 'flaky.db', fail_on=4)
        docs  = []
        for i in range(12):
            docs += [_sms(f"+{i:02d}")] * (20 - i)
        flaky.insert_all(RecordKind.SMS, docs)
        flaky.insert_all(RecordKind.CALL_LOG, [{'number': f"+{i:02d}"} for i in range(12)])

        result = correlate(flaky)

        assert len(result) == 10
        assert result[3]['number'] == '+03'
        assert result[3]['callLogs'] == []
        assert result[3]['smsCount'] == 17
        others = [r for i, r in enumerate(result) if i != 3]
        assert all(len(r['callLogs']) == 1 for r in others)


# ── CONTACT RESOLUTION ───────────────────────────────────────

class TestResolveContacts:

    def test_known_and_unknown(self):
        msgs = [Message(address='+1'), Message(address='+2')]
        resolve_contacts(msgs, [Contact(display_name='Alice', number='+1')])
        assert msgs[0].contact_name == 'Alice'
        assert msgs[1].contact_name is None

    def test_unresolved_serializes_as_null(self):
        msgs = resolve_contacts([Message(address='+9')], [])
        doc  = msgs[0].to_document()
        assert 'contact_name' in doc
        assert doc['contact_name'] is None


# ── RANGE BOUNDS ─────────────────────────────────────────────

class TestParseBound:

    def test_date_only_start_is_midnight(self):
        assert parse_bound('2024-03-31') == datetime(2024, 3, 31)

    def test_date_only_end_covers_day(self):
        assert parse_bound('2024-03-31', end_of_day=True) == datetime(2024, 3, 31, 23, 59, 59, 999999)

    def test_datetime_kept_exact(self):
        assert parse_bound('2024-03-31T10:30:00', end_of_day=True) == datetime(2024, 3, 31, 10, 30)

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_bound('soon')

    def test_timeline_includes_whole_end_day(self, store):
        store.insert_all(RecordKind.SMS, [_sms('a', '2024-03-31 23:30:00'), _sms('a', '2024-04-01 00:00:00')])
        result = timeline(store, parse_bound('2024-03-01'), parse_bound('2024-03-31', end_of_day=True))
        assert result == [{'date': '2024-03-31', 'totalMessages': 1, 'suspiciousMessages': 0}]
