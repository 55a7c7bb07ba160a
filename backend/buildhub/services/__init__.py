"""Services Layer — storage adapter, save pipeline, notification delivery.

Invariants:
    - Services own all async IO; decisions are delegated to core/
    - One save == one transaction, followed by summary sync and notification

Design Decisions:
    - Storage accessed through BuildStore only (routes never issue queries)
"""
