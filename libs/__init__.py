"""Shared libraries for the employee directory service.

Subpackages:
- ``libs.common``: configuration, logging and metrics.
- ``libs.records``: CSV record reading and field projection.
- ``libs.search_engine``: index client abstraction and the OpenSearch backend.

Notes:
- Avoid service-specific logic; keep modules cohesive and broadly useful.
"""
