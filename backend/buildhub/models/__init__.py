"""ORM Models — SQLAlchemy declarative models for repositories and builds.

Invariants:
    - All models inherit from Base (db/base.py)
    - Repository owns builds through repository_id; builds own matrix
      children through parent_id — plain foreign keys, no relationship() graph

Design Decisions:
    - All models imported here so Base.metadata is complete before create_all
"""

from buildhub.models.repository import Repository  # noqa: F401
from buildhub.models.build import Build  # noqa: F401
