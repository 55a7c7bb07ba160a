"""Core Layer — pure build logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are pure and deterministic

Design Decisions:
    - Functional core separated from imperative shell: the save pipeline in
      services/ calls these functions around its storage and publish steps
"""
