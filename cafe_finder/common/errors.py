"""
Engine Errors

"Nothing found" is never an error; these cover the cases where the engine
cannot produce a trustworthy answer at all.
"""

from typing import Sequence


class FinderError(Exception):
    """Base class for answer engine failures."""
    pass


class RetrievalError(FinderError):
    """Every queried domain collaborator failed."""

    def __init__(self, failed_domains: Sequence[str]):
        self.failed_domains = tuple(failed_domains)
        super().__init__(
            f"All queried domains failed: {', '.join(self.failed_domains)}"
        )


class SynthesisError(FinderError):
    """A matched template's required fields are absent or invalid on the candidate."""

    def __init__(self, template: str, record_id: str, detail: str):
        self.template = template
        self.record_id = record_id
        super().__init__(f"{template} template cannot render {record_id!r}: {detail}")
