"""
Models package.

Importing the modules registers every table on Base.metadata, for Alembic
and for the RUN_CREATE_ALL dev bootstrap.
"""

from __future__ import annotations

# imported for the side effect of registering tables

from velohub.models import store  # noqa: F401
from velohub.models import user  # noqa: F401
from velohub.models import vehicle  # noqa: F401
from velohub.models import vehicle_expense  # noqa: F401
from velohub.models import store_expense  # noqa: F401
