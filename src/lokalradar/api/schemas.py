"""
Pydantic response and request models for the API.

Field sets mirror the to_dict() output of the analysis types so route
handlers can return those dictionaries directly.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class TimelineEntryResponse(BaseModel):
    """One year's observation of a company."""

    year: int
    address: str
    postal_code: str
    postal_place: str
    employees: int
    founded: str = ""
    org_form: str = ""


class CompanyResponse(BaseModel):
    """A company's timeline and its detected moves."""

    orgnr: str
    name: str
    timeline: list[TimelineEntryResponse]
    address_changes: list["ChangeResponse"] = Field(default_factory=list)


class ChangeResponse(BaseModel):
    """
    An address-change event.

    The since-move fields are only present when the event was selected
    through a 'moved N years ago' query.
    """

    orgnr: str
    name: str
    year: int
    old_address: str
    new_address: str
    old_postal_code: str
    new_postal_code: str
    old_postal_place: str
    new_postal_place: str
    employees_before: int
    employees_after: int
    employee_change: int
    employee_change_percent: str

    years_since_move: Optional[int] = None
    current_year: Optional[int] = None
    employees_at_move: Optional[int] = None
    employees_now: Optional[int] = None
    employee_change_since_move: Optional[int] = None
    change_percent_since_move: Optional[str] = None


class EmployeeChangeResponse(BaseModel):
    """Headcount change between a company's first and last observation."""

    orgnr: str
    name: str
    first_year: int
    last_year: int
    employees_start: int
    employees_end: int
    total_change: int
    total_change_percent: str
    timeline: list[TimelineEntryResponse] = Field(default_factory=list)


class StatisticsResponse(BaseModel):
    """Headline dataset statistics."""

    total_companies: int
    total_address_changes: int
    companies_with_growth: int
    companies_with_decline: int
    total_employee_increase: int
    total_employee_decrease: int
    movers_8_years_ago: int
    movers_3_years_ago: int
    extreme_changes: int
    year_range: str
    earliest_year: Optional[int] = None
    reference_year: Optional[int] = None
    target_year_8_years_ago: Optional[int] = None
    target_year_3_years_ago: Optional[int] = None


class IngestResponse(BaseModel):
    """Result of replacing the dataset."""

    statistics: StatisticsResponse
    ingest: dict[str, Any]


class MoveMetricsResponse(BaseModel):
    """Metrics a member was clustered and scored on."""

    basis: str
    years_since_move: int
    employee_change: int
    change_percent: Optional[float] = None
    employees_now: int


class ScoredChangeResponse(ChangeResponse):
    """A move with its risk score and per-factor points."""

    risk_score: int
    factors: dict[str, int]


class RankedMemberResponse(ChangeResponse):
    """A cluster member with its risk score."""

    cluster_id: int
    metrics: MoveMetricsResponse
    risk_score: int


class ClusterStatsResponse(BaseModel):
    avg_years_since_move: float
    avg_change: float
    avg_percent_change: float
    avg_size: float
    median_change: float
    std_dev_change: float


class ClusterSummaryResponse(BaseModel):
    """Label, size and statistics of one cluster."""

    id: int
    label: str
    description: str
    size: int
    color: str
    risk: str
    stats: ClusterStatsResponse
    centroid: list[float] = Field(default_factory=list)


class ClusterOverviewResponse(BaseModel):
    total_companies: int
    avg_years_since_move: float
    avg_change: float
    clusters_by_risk: dict[str, int] = Field(default_factory=dict)


class ClusteringResponse(BaseModel):
    """Result of a clustering run."""

    k: int
    total_items: int
    excluded_items: int
    iterations: int
    converged: bool
    overview: ClusterOverviewResponse
    clusters: list[ClusterSummaryResponse]


class ClusterMembersResponse(BaseModel):
    """One cluster's members, highest risk first."""

    cluster: ClusterSummaryResponse
    members: list[RankedMemberResponse]


class RiskDistributionResponse(BaseModel):
    very_high: int = 0
    high: int = 0
    moderate: int = 0


class HighRiskResponse(BaseModel):
    """Members at or above a risk threshold across all clusters."""

    threshold: int
    count: int
    distribution: RiskDistributionResponse
    items: list[RankedMemberResponse]


class SnapshotResponse(BaseModel):
    """The last returned event list together with dataset statistics."""

    items: list[dict[str, Any]]
    count: int
    query: dict[str, Any]
    created_at: str
    statistics: StatisticsResponse


class ClusterRequest(BaseModel):
    """Parameters for a clustering run; unset fields use configured defaults."""

    k: Optional[int] = Field(default=None, ge=1, description="Number of clusters")
    windows: Optional[list[int]] = Field(
        default=None,
        description="'Moved N years ago' windows to cluster",
    )
    seed: Optional[int] = Field(default=None, description="Seed for reproducible runs")


CompanyResponse.model_rebuild()
