# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School profile endpoint.

The login page shows the school's branding before anyone is signed in,
so this endpoint needs a resolved tenant but no session.
"""

from fastapi import APIRouter

from schoolhub.api.dependencies import Tenant
from schoolhub.domains.school import build_public_profile
from schoolhub.models.school import SchoolProfileResponse

router = APIRouter()


@router.get("", response_model=SchoolProfileResponse, summary="Public school profile")
async def get_school(tenant: Tenant) -> SchoolProfileResponse:
    """Return the public profile of the school served under this host."""
    return SchoolProfileResponse(**build_public_profile(tenant.school))
