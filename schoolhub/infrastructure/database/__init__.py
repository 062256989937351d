# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure.

- connection: the central database (school profiles keyed by host)
- tenant_manager: lazily pooled connections to per-school databases
"""

from schoolhub.infrastructure.database.connection import (
    DatabaseError,
    check_central_database_connection,
    close_central_database,
    get_central_session,
    init_central_database,
)
from schoolhub.infrastructure.database.tenant_manager import (
    TenantDatabaseManager,
    TenantNotFoundError,
)

__all__ = [
    "DatabaseError",
    "init_central_database",
    "close_central_database",
    "get_central_session",
    "check_central_database_connection",
    "TenantDatabaseManager",
    "TenantNotFoundError",
]
