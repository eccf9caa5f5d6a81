"""Tabular record sources and transforms.

- ``reader``: lazy CSV ``Record`` iteration and ``RecordSourceError``.
- ``projector``: ``project`` drops one field from a record.
"""
