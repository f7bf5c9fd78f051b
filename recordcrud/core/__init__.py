"""Core Layer - pure record-lifecycle logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/ or infrastructure/
    - All functions are pure and deterministic

Design Decisions:
    - Functional core separated from the async shell that runs stages and storage
"""
