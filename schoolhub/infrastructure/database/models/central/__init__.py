# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Central database models (tenant registry)."""

from schoolhub.infrastructure.database.models.central.school_profile import (
    SUBSCRIPTION_PLANS,
    SchoolProfile,
)

__all__ = ["SchoolProfile", "SUBSCRIPTION_PLANS"]
