"""FastAPI server adapter for adminflow.

Business logic stays in `adminflow.workflow` and `adminflow.reports`; this package
only handles routing, CORS and error mapping.
"""

from __future__ import annotations

__all__ = ["create_app"]

from adminflow.server.app import create_app
