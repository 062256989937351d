# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services for SchoolHub.

- session: Redis-backed session records
- auth: login, OTP step-up and session authentication
- user: tenant user lookups and role-scoped views
- school: tenant registry lookups
"""
