"""Survey content loader with caching and validation.

This module loads survey definitions and company benchmarks from YAML files,
validates them against Pydantic schemas, and caches the results.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

import yaml
from pydantic import TypeAdapter, ValidationError

from pulse.config import get_settings
from pulse.schemas.survey import Survey
from pulse.logging_config import get_logger

logger = get_logger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.parent

_benchmarks_adapter = TypeAdapter(dict[str, float])


class SurveyNotFoundError(Exception):
    """Raised when a survey file is not found."""
    pass


class SurveyValidationError(Exception):
    """Raised when a survey or benchmark file fails validation."""
    pass


def _read_yaml(path: Path, label: str):
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"YAML parsing error for {label}: {e}")
        raise SurveyValidationError(f"Invalid YAML in '{label}': {e}")
    except OSError as e:
        logger.error(f"Error reading file {path}: {e}")
        raise SurveyValidationError(f"Error reading '{label}': {e}")


class SurveyLoader:
    """Service for loading and caching survey definitions and benchmarks.

    Surveys are loaded from ``<surveys_dir>/<survey_id>.yaml``; benchmarks
    from a single YAML mapping of category -> company average.
    """

    def __init__(
        self,
        surveys_dir: Optional[str] = None,
        benchmarks_file: Optional[str] = None
    ):
        """Initialize survey loader.

        Args:
            surveys_dir: Path to surveys directory (defaults to ./surveys)
            benchmarks_file: Path to benchmarks YAML (defaults to ./data/benchmarks.yaml)
        """
        if surveys_dir is None:
            surveys_dir = PROJECT_ROOT / "surveys"
        if benchmarks_file is None:
            benchmarks_file = PROJECT_ROOT / "data" / "benchmarks.yaml"

        self.surveys_dir = Path(surveys_dir)
        self.benchmarks_file = Path(benchmarks_file)

        if not self.surveys_dir.exists():
            logger.warning(f"Surveys directory not found: {self.surveys_dir}")

    @lru_cache(maxsize=128)
    def load_survey(self, survey_id: str) -> Survey:
        """Load and validate a survey from YAML file.

        Args:
            survey_id: Survey identifier (matches YAML filename without .yaml)

        Returns:
            Validated Survey object

        Raises:
            SurveyNotFoundError: If survey file doesn't exist
            SurveyValidationError: If survey fails validation

        Example:
            >>> loader = SurveyLoader()
            >>> survey = loader.load_survey("s1")
            >>> print(survey.title)
            'Estrés Laboral y Clima (General)'
        """
        yaml_path = self.surveys_dir / f"{survey_id}.yaml"

        if not yaml_path.exists():
            logger.error(f"Survey file not found: {yaml_path}")
            raise SurveyNotFoundError(f"Survey '{survey_id}' not found at {yaml_path}")

        raw_data = _read_yaml(yaml_path, survey_id)
        if not isinstance(raw_data, dict):
            raise SurveyValidationError(f"Survey '{survey_id}' must be a YAML mapping")

        try:
            survey = Survey(**raw_data)
        except ValidationError as e:
            logger.error(f"Validation error for survey {survey_id}: {e}")
            raise SurveyValidationError(f"Validation failed for survey '{survey_id}': {e}")

        if survey.id != survey_id:
            raise SurveyValidationError(
                f"Survey id '{survey.id}' does not match filename '{survey_id}'"
            )

        logger.info(f"Successfully loaded survey: {survey_id} ({len(survey.questions)} questions)")
        return survey

    def list_surveys(self) -> list[str]:
        """List all available survey IDs.

        Returns:
            Sorted list of survey IDs (filenames without .yaml extension)
        """
        if not self.surveys_dir.exists():
            return []

        survey_ids = [f.stem for f in self.surveys_dir.glob("*.yaml")]

        logger.debug(f"Found {len(survey_ids)} surveys: {survey_ids}")
        return sorted(survey_ids)

    def load_all(self) -> list[Survey]:
        """Load every available survey, in survey ID order."""
        return [self.load_survey(survey_id) for survey_id in self.list_surveys()]

    @lru_cache(maxsize=1)
    def load_benchmarks(self) -> dict[str, float]:
        """Load company benchmark averages per category.

        A missing file yields no benchmarks; the dashboard then falls back
        to its default benchmark for every category.

        Raises:
            SurveyValidationError: If the file is not a category -> number mapping
        """
        if not self.benchmarks_file.exists():
            logger.warning(f"Benchmarks file not found: {self.benchmarks_file}")
            return {}

        raw_data = _read_yaml(self.benchmarks_file, self.benchmarks_file.name)
        try:
            benchmarks = _benchmarks_adapter.validate_python(raw_data or {})
        except ValidationError as e:
            logger.error(f"Validation error for benchmarks: {e}")
            raise SurveyValidationError(f"Validation failed for benchmarks: {e}")

        logger.info(f"Loaded {len(benchmarks)} benchmarks")
        return benchmarks

    def clear_cache(self):
        """Clear the survey and benchmark caches."""
        self.load_survey.cache_clear()
        self.load_benchmarks.cache_clear()
        logger.info("Survey cache cleared")


# Global singleton instance
_loader_instance: Optional[SurveyLoader] = None


def get_survey_loader() -> SurveyLoader:
    """Get global SurveyLoader instance.

    Creates singleton instance on first call, honoring the configured paths.

    Returns:
        Global SurveyLoader instance
    """
    global _loader_instance
    if _loader_instance is None:
        settings = get_settings()
        _loader_instance = SurveyLoader(settings.surveys_dir, settings.benchmarks_file)
    return _loader_instance
