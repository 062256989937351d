# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School profile response models."""

from pydantic import BaseModel, ConfigDict


class SchoolProfileResponse(BaseModel):
    """Public profile of the school served under the request host."""

    model_config = ConfigDict(from_attributes=True)

    host: str
    name: str
    short_name: str | None = None
    initials: str | None = None
    slogan: str | None = None
    description: str | None = None
    logo_url: str | None = None
    year_founded: int | None = None
    subscription_plan: str = "basic"
    enabled_features: list[str] = []
