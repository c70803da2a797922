"""
phonescan/pipeline.py
Ingestion and query orchestration over a provider and a store.

Ingestion is fetch → parse/normalize (→ classify, for SMS) → replace-all.
Provider and store failures propagate as CollaboratorError and abort the
whole operation; nothing here retries.
"""

import logging
import re
from typing import Any, Dict, List

from phonescan.aggregators.correlation import resolve_contacts
from phonescan.detectors.keyword_detector import classify
from phonescan.models.record import CallRecord, Contact, Message, RecordKind
from phonescan.parsers.call_parser import parse_call_log_data
from phonescan.parsers.contact_parser import parse_contacts_data
from phonescan.parsers.sms_parser import parse_sms_data
from phonescan.providers.base import CALL_LOG, CONTACTS, SMS_INBOX, SMS_SENT, RawTextProvider
from phonescan.store.base import RecordStore

logger = logging.getLogger(__name__)

URL_PATTERN = re.compile(r'http://|https://|www\.', re.IGNORECASE)


# ── INGESTION ────────────────────────────────────────────────

def ingest_sms(provider: RawTextProvider, store: RecordStore) -> List[Message]:
    """
    Inbox then sent, concatenated in that order. Contact names come from
    the contacts already in the store, so ingest contacts first.
    """
    inbox = parse_sms_data(provider.fetch(SMS_INBOX))
    sent  = parse_sms_data(provider.fetch(SMS_SENT))
    messages = inbox + sent

    contacts = [Contact.from_document(d) for d in store.find_by(RecordKind.CONTACT)]
    resolve_contacts(messages, contacts)

    written = store.replace_all(RecordKind.SMS, (m.to_document() for m in messages))
    logger.info(
        f"SMS ingest complete: {len(inbox)} received + {len(sent)} sent | "
        f"{sum(1 for m in messages if m.is_suspicious)} suspicious | {written} stored"
    )
    return messages


def ingest_call_log(provider: RawTextProvider, store: RecordStore) -> List[CallRecord]:
    records = parse_call_log_data(provider.fetch(CALL_LOG))
    written = store.replace_all(RecordKind.CALL_LOG, (r.to_document() for r in records))
    logger.info(f"Call log ingest complete: {written} stored")
    return records


def ingest_contacts(provider: RawTextProvider, store: RecordStore) -> List[Contact]:
    contacts = parse_contacts_data(provider.fetch(CONTACTS))
    written  = store.replace_all(RecordKind.CONTACT, (c.to_document() for c in contacts))
    logger.info(f"Contacts ingest complete: {written} stored")
    return contacts


# ── QUERIES ──────────────────────────────────────────────────

def _contains(value: Any, needle: str) -> bool:
    return isinstance(value, str) and needle in value.lower()


def search(store: RecordStore, keyword: str) -> Dict[str, List[Dict[str, Any]]]:
    """
    Case-insensitive substring search across all three kinds.
    SMS hits are re-classified from their body with the current rules.
    """
    needle = keyword.lower()

    sms_hits = store.find_by(
        RecordKind.SMS,
        lambda d: _contains(d.get('body'), needle) or _contains(d.get('address'), needle),
    )
    sms_results = []
    for doc in sms_hits:
        label = classify(doc.get('body'))
        sms_results.append({
            **doc,
            'is_suspicious': label.is_suspicious,
            'category':      label.category,
        })

    call_results = store.find_by(
        RecordKind.CALL_LOG,
        lambda d: _contains(d.get('number'), needle),
    )
    contact_results = store.find_by(
        RecordKind.CONTACT,
        lambda d: _contains(d.get('display_name'), needle) or _contains(d.get('number'), needle),
    )

    logger.info(
        f"Search matched {len(sms_results)} SMS, "
        f"{len(call_results)} calls, {len(contact_results)} contacts"
    )
    return {
        'sms':      sms_results,
        'callLog':  call_results,
        'contacts': contact_results,
    }


def url_analysis(store: RecordStore) -> List[Dict[str, Any]]:
    """Stored SMS whose body contains a link."""
    return store.find_by(
        RecordKind.SMS,
        lambda d: isinstance(d.get('body'), str) and bool(URL_PATTERN.search(d['body'])),
    )
