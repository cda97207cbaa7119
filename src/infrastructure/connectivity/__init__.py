# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Connectivity signals feeding the sync engine."""

from src.infrastructure.connectivity.monitor import (
    ConnectivityListener,
    ConnectivityMonitor,
    ConnectivitySignal,
    PingConnectivityMonitor,
)

__all__ = [
    "ConnectivityListener",
    "ConnectivityMonitor",
    "ConnectivitySignal",
    "PingConnectivityMonitor",
]
