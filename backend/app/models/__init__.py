# Models package init
"""
DocTrack Backend — ORM Models
===============================

Importing this package registers every table on `Base.metadata`
(used by Alembic autogenerate and Database.create_all).
"""

from app.models.notification import Notification
from app.models.student import RequestType, StudentRequest

__all__ = ["Notification", "RequestType", "StudentRequest"]
