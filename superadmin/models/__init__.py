"""
Models module - internal data structures.

Difference from schemas:
- Models: objects passed between services (e.g. the admin session)
- Schemas: API contract (what client sends/receives)
"""

from superadmin.models.session import AdminSession

__all__ = ["AdminSession"]
