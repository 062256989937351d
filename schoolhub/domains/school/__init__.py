# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School (tenant registry) domain."""

from schoolhub.domains.school.service import (
    PUBLIC_PROFILE_FIELDS,
    SchoolService,
    build_public_profile,
    normalize_host,
)

__all__ = [
    "PUBLIC_PROFILE_FIELDS",
    "SchoolService",
    "build_public_profile",
    "normalize_host",
]
