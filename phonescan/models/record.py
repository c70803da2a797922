"""
phonescan/models/record.py
Shared dataclass schema. Parsers, detectors, the store and the
aggregators all use these types. Data only, no logic here.
"""

from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, Dict, Optional


class RecordKind(str, Enum):
    """Store collection name per entity kind."""
    SMS      = 'sms'
    CALL_LOG = 'call_log'
    CONTACT  = 'contact'


def _from_document(cls, doc: Dict[str, Any]):
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in doc.items() if k in known})


@dataclass
class Message:
    """Normalized SMS record."""
    address:        Optional[str]  = None
    date:           Optional[str]  = None   # YYYY-MM-DD HH:mm:ss (local)
    direction:      Optional[str]  = None   # received / sent
    body:           Optional[str]  = None
    is_suspicious:  bool           = False
    category:       Optional[str]  = None   # set only when is_suspicious
    contact_name:   Optional[str]  = None

    def to_document(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> 'Message':
        return _from_document(cls, doc)


@dataclass
class CallRecord:
    """Normalized call log record."""
    number:     Optional[str]  = None
    date:       Optional[str]  = None
    duration:   Optional[str]  = None   # e.g. "4m 32s"
    direction:  Optional[str]  = None   # incoming / outgoing / missed / unknown

    def to_document(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> 'CallRecord':
        return _from_document(cls, doc)


@dataclass
class Contact:
    """Address book entry. number is the join key against Message.address."""
    display_name:   Optional[str]  = None
    number:         Optional[str]  = None

    def to_document(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> 'Contact':
        return _from_document(cls, doc)
