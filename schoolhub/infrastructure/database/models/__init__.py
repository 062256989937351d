# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy models for the central and tenant databases."""

from schoolhub.infrastructure.database.models.base import Base, TenantBase, TimestampMixin

__all__ = ["Base", "TenantBase", "TimestampMixin"]
