"""
JobTrail Backend — ORM Models
===============================

Importing this package registers every table on ``Base.metadata`` (used by
the startup create_all() and by Alembic autogenerate).
"""

from jobtrail.models.application import Application
from jobtrail.models.auth_token import AuthToken
from jobtrail.models.resume import Resume
from jobtrail.models.user import User

__all__ = ["Application", "AuthToken", "Resume", "User"]
