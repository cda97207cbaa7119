# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for EduVerse.

Domains:
    sync: Offline-first synchronization between the durable cache and
        the remote document store.
    content: Record-level editing of portal collections on top of sync.
"""
