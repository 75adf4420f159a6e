"""
API route modules.
"""

from lokalradar.api.routes.datasets import router as datasets_router
from lokalradar.api.routes.changes import router as changes_router
from lokalradar.api.routes.clusters import router as clusters_router

__all__ = [
    "datasets_router",
    "changes_router",
    "clusters_router",
]
