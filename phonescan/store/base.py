"""
phonescan/store/base.py
Abstract document store. Each RecordKind is a collection of plain dicts.
To add a backend: subclass RecordStore and implement the three abstract
operations; group_by() works on top of find_by() unless overridden.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Optional

from phonescan.models.record import RecordKind

Document  = Dict[str, Any]
Predicate = Callable[[Document], bool]


class RecordStore(ABC):
    """
    Failures raise StoreError. There is no transaction spanning
    delete_all() and insert_all(): readers between the two calls
    see an empty collection.
    """

    @abstractmethod
    def insert_all(self, kind: RecordKind, documents: Iterable[Document]) -> int:
        """Append documents to the collection. Returns the number written."""
        ...

    @abstractmethod
    def delete_all(self, kind: RecordKind) -> int:
        """Remove every document of `kind`. Returns the number removed."""
        ...

    @abstractmethod
    def find_by(self, kind: RecordKind, predicate: Optional[Predicate] = None) -> List[Document]:
        """Documents of `kind` in insertion order, filtered by `predicate`."""
        ...

    def group_by(
        self,
        kind:       RecordKind,
        key:        str,
        aggregate:  Callable[[List[Document]], Any],
        predicate:  Optional[Predicate] = None,
    ) -> Dict[Any, Any]:
        """
        Group documents by the value of field `key` and reduce each group
        with `aggregate`. Groups appear in order of first occurrence.
        Documents missing `key` group under None.
        """
        groups: Dict[Any, List[Document]] = {}
        for doc in self.find_by(kind, predicate):
            groups.setdefault(doc.get(key), []).append(doc)
        return {k: aggregate(docs) for k, docs in groups.items()}

    def replace_all(self, kind: RecordKind, documents: Iterable[Document]) -> int:
        """Clear then bulk-insert. Two separate steps, not atomic."""
        self.delete_all(kind)
        return self.insert_all(kind, documents)
