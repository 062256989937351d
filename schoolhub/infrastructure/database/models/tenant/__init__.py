# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tenant database models."""

from schoolhub.infrastructure.database.models.tenant.user import (
    Administrator,
    Student,
    SystemAdmin,
    Teacher,
    User,
    UserRole,
)

__all__ = [
    "User",
    "UserRole",
    "Student",
    "Teacher",
    "Administrator",
    "SystemAdmin",
]
