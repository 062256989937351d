# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Infrastructure layer for SchoolHub.

- cache: Redis client backing the session store
- database: Central (tenant registry) and per-tenant SQLAlchemy connections
"""
