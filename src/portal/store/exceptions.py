"""Store-level exceptions.

These never cross a component boundary: services catch them and turn them
into ``None`` / failure envelopes.
"""


class StoreError(Exception):
    """The backing store failed (unreachable, constraint violation, bad query)."""


class DuplicateRecordError(StoreError):
    """An insert or update collided with a uniqueness constraint."""
