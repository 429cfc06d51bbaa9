"""
Routers package for FastAPI endpoints.

Organized by domain:
- extract: PDF upload and report extraction
- export: Report export in JSON, CSV and Excel
- health: Service health checks
"""

from . import export, extract, health

__all__ = ["export", "extract", "health"]
