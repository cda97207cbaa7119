# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Infrastructure layer for external service integrations.

This package contains adapters for:
- Durable local cache (files, memory)
- Remote document store (Redis, memory)
- Connectivity signals
"""
