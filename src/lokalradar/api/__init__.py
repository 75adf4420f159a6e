"""
HTTP API for lokalradar.

Provides REST routes for:
- Ingesting yearly registry extracts
- Querying address changes, employee changes and statistics
- Clustering movers and retrieving high-risk companies
"""
