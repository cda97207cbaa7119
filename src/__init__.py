"""EduVerse Backend.

Offline-first content portal: batches, subjects, lectures, notes, practice
problems and students, kept consistent between a durable local cache and
a remote real-time document store.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
