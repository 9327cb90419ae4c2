"""Narrative state machine for branching text adventures."""

__version__ = "0.3.0"
