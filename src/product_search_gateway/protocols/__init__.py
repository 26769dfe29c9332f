# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Protocol definitions for gateway collaborators.

Available protocols:
- CatalogProtocol: Interface for the remote product catalog
- MetricsCollectorProtocol: Interface for metrics backends (re-exported)
"""

from ..observability.protocols import MetricsCollectorProtocol
from .catalog import CatalogProtocol

__all__ = [
    "CatalogProtocol",
    "MetricsCollectorProtocol",
]
