"""ORM Models - building blocks for tables managed by the CRUD recipe.

Invariants:
    - Concrete record tables belong to the embedding application
    - They subclass db.base.Base and mix in RecordMixin
"""

from recordcrud.models.record_mixin import RecordMixin  # noqa: F401
