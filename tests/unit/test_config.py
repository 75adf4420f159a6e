"""
Unit tests for settings validation and failure reasons.
"""

import pytest
from pydantic import ValidationError

from lokalradar.config import Settings
from lokalradar.exceptions import (
    AnalysisError,
    CompanyNotFoundError,
    DataFormatError,
    DatasetNotLoadedError,
    FailureReason,
    InsufficientDataError,
)


class TestSettings:
    """Tests for configuration defaults and validation."""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.cluster_count == 4
        assert settings.max_iterations == 100
        assert settings.move_windows == [8, 3]
        assert settings.risk_threshold == 70
        assert settings.reference_year_policy == "dataset"
        assert settings.clustering_seed is None
        assert settings.legacy_remap_enabled is True
        assert not settings.is_production

    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv("CLUSTER_COUNT", "6")
        monkeypatch.setenv("MOVE_WINDOWS", "[10, 5, 2]")
        monkeypatch.setenv("CLUSTERING_SEED", "123")

        settings = Settings(_env_file=None)

        assert settings.cluster_count == 6
        assert settings.move_windows == [10, 5, 2]
        assert settings.clustering_seed == 123

    def test_log_level_normalized(self):
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    @pytest.mark.parametrize(
        "field,value",
        [
            ("log_level", "LOUD"),
            ("cluster_count", 0),
            ("max_iterations", 0),
            ("move_windows", []),
            ("move_windows", [8, -1]),
            ("risk_threshold", 101),
            ("risk_threshold", -1),
            ("reference_year_policy", "fiscal"),
        ],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: value})

    def test_production_rejects_debug(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, environment="production", debug=True)

    def test_production(self):
        settings = Settings(_env_file=None, environment="production")

        assert settings.is_production


class TestAnalysisErrors:
    """Tests for typed failure reasons."""

    @pytest.mark.parametrize(
        "error_cls,reason",
        [
            (DataFormatError, FailureReason.NO_USABLE_FILES),
            (InsufficientDataError, FailureReason.NOT_ENOUGH_DATA),
            (DatasetNotLoadedError, FailureReason.NO_DATASET),
            (CompanyNotFoundError, FailureReason.UNKNOWN_COMPANY),
        ],
    )
    def test_reasons(self, error_cls, reason):
        error = error_cls("details")

        assert isinstance(error, AnalysisError)
        assert error.reason == reason

    def test_to_dict_includes_context(self):
        error = CompanyNotFoundError("No company with orgnr 1", context={"orgnr": "1"})

        assert error.to_dict() == {
            "error": "unknown_company",
            "message": "No company with orgnr 1",
            "orgnr": "1",
        }
        assert str(error) == "unknown_company: No company with orgnr 1"
