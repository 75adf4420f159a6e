"""
Lokalradar - relocation risk analysis for business registry extracts.

Ingests yearly registry snapshots and:
- Reconstructs per-company timelines of address and employee count
- Detects address changes and employee growth/decline
- Clusters recent movers into interpretable risk groups
- Scores how likely a company is to need new premises soon
"""

__version__ = "0.1.0"
