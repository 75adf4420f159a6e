"""
FastAPI dependencies for the API.

Provides:
- The shared AnalysisState from app.state
- The current Dataset (409 when nothing has been ingested)
- The current clustering result
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from lokalradar.analysis.dataset import Dataset
from lokalradar.api.state import AnalysisState
from lokalradar.clustering.engine import ClusteringResult
from lokalradar.clustering.risk import RelocationRiskScorer


def get_state(request: Request) -> AnalysisState:
    """Get the analysis state created during app startup."""
    return request.app.state.analysis


State = Annotated[AnalysisState, Depends(get_state)]


def get_dataset(state: State) -> Dataset:
    """
    Get the current dataset.

    Raises:
        DatasetNotLoadedError: Nothing has been ingested yet
    """
    return state.require_dataset()


CurrentDataset = Annotated[Dataset, Depends(get_dataset)]


def get_clustering(state: State, dataset: CurrentDataset) -> ClusteringResult:
    """
    Get the last clustering result for the current dataset.

    Raises:
        HTTPException: 409 if clustering has not been run
    """
    if state.clustering is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="No clustering result; run POST /api/v1/clusters first",
        )
    return state.clustering


CurrentClustering = Annotated[ClusteringResult, Depends(get_clustering)]


def get_scorer() -> RelocationRiskScorer:
    return RelocationRiskScorer()


Scorer = Annotated[RelocationRiskScorer, Depends(get_scorer)]
