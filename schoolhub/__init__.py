"""SchoolHub Backend.

Multi-tenant school management platform: session-backed authentication
for students, teachers, administrators and system administrators.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
