"""Interaction engine: domain snapshots, navigation codec, kind registry, reducer.

Nothing in this package performs I/O or imports Textual.
"""
