# =============================================================================
# database/__init__.py
# =============================================================================
# PURPOSE:
#   Makes the database folder a Python package and provides easy imports.
#
# USAGE:
#   Instead of writing:
#       from database.connection import ConnectionPool
#       from database.schema import init_db
#       from database.queries import StorageGateway
#
#   You can write:
#       from database import ConnectionPool, init_db, StorageGateway
# =============================================================================

from .connection import (
    ConnectionPool,
    PoolClosedError,
    PoolTimeoutError,
    open_connection,
    transaction,
)
from .schema import init_db, get_table_info
from .queries import StorageGateway
