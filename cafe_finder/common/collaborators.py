"""
Domain Collaborators

Abstract interface for the data stores behind each result domain
(people, tools, FAQs, sessions, resources, discussions).
The engine only relies on `search(terms)`; how a store matches is its own business.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Sequence


class DomainCollaborator(ABC):
    """
    Abstract base class for domain search backends.

    Each collaborator must implement:
    - search: return zero or more rows for the expanded terms. Every row needs
      at least `id`, `title` or `name`, and optionally `tags`.
    """

    def __init__(self, name: str):
        """
        Initialize collaborator.

        Args:
            name: Domain name used in logs and errors
        """
        self.name = name

    @abstractmethod
    async def search(self, terms: List[str]) -> List[Dict[str, Any]]:
        """
        Search the domain.

        Args:
            terms: A term and its synonyms, as produced by the vocabulary index

        Returns:
            Matching rows as plain dicts
        """
        pass


class InMemoryCollaborator(DomainCollaborator):
    """
    Collaborator over a static list of rows.

    A row matches when any term is a case-insensitive substring of one of the
    indexed fields. List-valued fields (tags, topics) are searched item by item.
    """

    def __init__(
        self,
        name: str,
        rows: Sequence[Mapping[str, Any]],
        fields: Sequence[str] = ("title", "name", "tags"),
    ):
        super().__init__(name)
        self._rows = [dict(row) for row in rows]
        self._fields = tuple(fields)

    def __len__(self) -> int:
        return len(self._rows)

    def _haystack(self, row: Mapping[str, Any]) -> List[str]:
        values = []
        for field_name in self._fields:
            value = row.get(field_name)
            if value is None:
                continue
            if isinstance(value, (list, tuple)):
                values.extend(str(v).lower() for v in value)
            else:
                values.append(str(value).lower())
        return values

    async def search(self, terms: List[str]) -> List[Dict[str, Any]]:
        needles = [t.lower() for t in terms if t and t.strip()]
        if not needles:
            return []

        matches = []
        for row in self._rows:
            haystack = self._haystack(row)
            if any(needle in value for needle in needles for value in haystack):
                matches.append(dict(row))
        return matches
