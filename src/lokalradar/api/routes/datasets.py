"""
Dataset API routes.

Ingest of registry extracts, dataset statistics and company lookup.
"""

import logging

from fastapi import APIRouter, File, UploadFile

from lokalradar.api.deps import CurrentDataset, State
from lokalradar.api.schemas import CompanyResponse, IngestResponse, StatisticsResponse
from lokalradar.exceptions import CompanyNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/datasets", response_model=IngestResponse, status_code=201)
async def ingest_extracts(
    state: State,
    files: list[UploadFile] = File(..., description="Yearly registry extracts (CSV)"),
):
    """
    Replace the dataset with one built from the uploaded extracts.

    The year of each extract is taken from its filename. Any previous
    clustering result and export snapshot are discarded.
    """
    logger.info(f"Ingesting {len(files)} files: {[f.filename for f in files]}")

    dataset = await state.pipeline.ingest(files)
    state.replace_dataset(dataset)

    return {
        "statistics": dataset.statistics.to_dict(),
        "ingest": state.pipeline.last_ingest_stats.to_dict(),
    }


@router.get("/statistics", response_model=StatisticsResponse)
async def get_statistics(dataset: CurrentDataset):
    """Headline numbers for the current dataset."""
    return dataset.statistics.to_dict()


@router.get("/companies/{orgnr}", response_model=CompanyResponse)
async def get_company(orgnr: str, dataset: CurrentDataset):
    """One company's yearly timeline and detected moves."""
    company = dataset.get_company(orgnr)
    if company is None:
        raise CompanyNotFoundError(f"No company with orgnr {orgnr}", context={"orgnr": orgnr})

    return {
        **company.to_dict(),
        "address_changes": [e.to_dict() for e in dataset.changes_for_company(orgnr)],
    }
