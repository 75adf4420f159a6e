"""
Clustering and risk API routes.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, HTTPException, Query

from lokalradar.analysis.changes import build_candidate
from lokalradar.analysis.metrics import metrics_for
from lokalradar.api.deps import CurrentClustering, CurrentDataset, Scorer, State
from lokalradar.api.schemas import (
    ClusterMembersResponse,
    ClusterRequest,
    ClusteringResponse,
    HighRiskResponse,
    ScoredChangeResponse,
)
from lokalradar.clustering.engine import Cluster
from lokalradar.exceptions import CompanyNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter()


def _cluster_summary(cluster: Cluster) -> dict:
    return {**cluster.summary(), "centroid": cluster.centroid}


@router.post("/clusters", response_model=ClusteringResponse)
async def run_clustering(
    state: State,
    dataset: CurrentDataset,
    params: Optional[ClusterRequest] = Body(None),
):
    """
    Cluster recent movers into labelled risk groups.

    Unset parameters fall back to the configured cluster count, move
    windows and seed. The result replaces any previous clustering.
    """
    params = params or ClusterRequest()
    result = await state.pipeline.cluster_async(
        dataset,
        k=params.k,
        windows=params.windows,
        seed=params.seed,
    )
    state.clustering = result

    return {
        **result.to_dict(),
        "clusters": [_cluster_summary(c) for c in result.clusters],
    }


@router.get("/clusters/{cluster_id}/companies", response_model=ClusterMembersResponse)
async def cluster_companies(
    cluster_id: int,
    clustering: CurrentClustering,
    scorer: Scorer,
):
    """Members of one cluster, highest relocation risk first."""
    cluster = clustering.get_cluster(cluster_id)
    if cluster is None:
        raise HTTPException(status_code=404, detail=f"Cluster {cluster_id} not found")

    ranked = scorer.rank_members(cluster.members)
    return {
        "cluster": _cluster_summary(cluster),
        "members": [s.to_dict() for s in ranked],
    }


@router.get("/risk/high", response_model=HighRiskResponse)
async def high_risk(
    state: State,
    clustering: CurrentClustering,
    scorer: Scorer,
    threshold: Optional[int] = Query(None, ge=0, le=100, description="Minimum risk score"),
):
    """Movers across all clusters scoring at or above the threshold."""
    if threshold is None:
        threshold = state.pipeline.config.risk_threshold

    selected = scorer.high_risk(clustering, threshold)
    return {
        "threshold": threshold,
        "count": len(selected),
        "distribution": scorer.distribution(selected, threshold),
        "items": [s.to_dict() for s in selected],
    }


@router.get("/risk/companies/{orgnr}", response_model=list[ScoredChangeResponse])
async def company_risk(orgnr: str, dataset: CurrentDataset, scorer: Scorer):
    """Risk score and factor breakdown for each of one company's moves."""
    company = dataset.get_company(orgnr)
    if company is None:
        raise CompanyNotFoundError(f"No company with orgnr {orgnr}", context={"orgnr": orgnr})

    scored = []
    for event in dataset.changes_for_company(orgnr):
        candidate = build_candidate(event, company, dataset.reference_year)
        factors = scorer.factors(metrics_for(candidate))
        scored.append({
            **candidate.to_dict(),
            "risk_score": factors.total_score(),
            "factors": factors.to_dict(),
        })
    return scored
