"""Database package - validating data layer over a pluggable table store.

``from database import db`` gives the composed singleton; stores are attached
with ``db.configure(store)`` during bootstrap.
"""
from database.helpers import (  # noqa: F401
    BackendError,
    DatabaseError,
    ValidationError,
)
from database.store import Embed, Query, TableStore  # noqa: F401
from database.core import DatabaseCore
from database.clients import ClientsMixin
from database.time_entries import TimeEntriesMixin


class Database(DatabaseCore, ClientsMixin, TimeEntriesMixin):
    """Composed database class combining all mixins."""
    pass


db = Database()
