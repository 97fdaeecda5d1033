"""Risk and KPI derivation for the wellbeing dashboard.

Reads a user's scored history and derives the burnout risk index, headline
KPIs and chart series. Nothing here mutates the history.

Category lookups go through fallback chains: the first category present in
the latest scores wins, otherwise a neutral default applies. Surveys in other
languages only need their labels added to the chains.
"""

from typing import Mapping, Optional, Sequence

from pulse.schemas.dashboard import (
    BenchmarkPoint,
    BurnoutRisk,
    DashboardMetrics,
    KPIMetric,
    RadarPoint,
    RiskLevel,
    TrendPoint,
)
from pulse.schemas.result import SurveyResult
from pulse.services.scoring import round_score
from pulse.logging_config import get_logger

logger = get_logger(__name__)

# Fallback chains: (category labels in priority order, default value)
EXHAUSTION_LOOKUP = (("Agotamiento", "Carga de Trabajo"), 3.0)
SUPPORT_LOOKUP = (("Apoyo", "Liderazgo"), 3.0)
ENPS_CATEGORIES = ("eNPS",)

ENPS_DEFAULT_KPI = 40.0
DEFAULT_BENCHMARK = 3.5
BENCHMARK_CATEGORY_LIMIT = 5
RADAR_FULL_MARK = 5.0

# Lower bound of each band, checked from the highest down
RISK_BANDS = (
    (70.0, RiskLevel.HIGH),
    (40.0, RiskLevel.MODERATE),
    (0.0, RiskLevel.HEALTHY),
)

ADVISORY_THRESHOLD = 50.0
ADVISORY_ALERT = (
    "Alerta: Tus niveles de carga cognitiva están elevados. "
    "Se recomienda una sesión de desconexión estratégica."
)
ADVISORY_STABLE = "Tus métricas de resiliencia son estables. Mantén tus rutinas de recuperación."

EMPTY_HISTORY_MESSAGE = (
    "Completa tu primera evaluación para desbloquear métricas de estrés, "
    "comparativas organizacionales y prevención de burnout."
)


class EmptyHistoryError(Exception):
    """Raised when metrics are requested for a user with no results."""
    pass


def lookup_score(
    scores: Mapping[str, float],
    categories: Sequence[str],
    default: Optional[float] = None
) -> Optional[float]:
    """Return the score of the first category present, else ``default``.

    Example:
        >>> lookup_score({"Liderazgo": 2.0}, ("Apoyo", "Liderazgo"), 3.0)
        2.0
    """
    for category in categories:
        if category in scores:
            return scores[category]
    return default


def burnout_risk(exhaustion: float, support: float) -> float:
    """Burnout risk index on a 0-100 scale.

    Exhaustion is weighted 1.5x against inverted support (6 - support) and
    the 1-5 inputs are scaled onto 0-100, then clamped.

    Example:
        >>> burnout_risk(5, 2)
        92.0
    """
    risk = ((exhaustion * 1.5) + (6 - support)) / 2.5 * 20
    return min(100.0, max(0.0, risk))


def classify_risk(risk: float) -> RiskLevel:
    """Map a risk index to its band (lower bounds inclusive)."""
    for lower_bound, level in RISK_BANDS:
        if risk >= lower_bound:
            return level
    return RiskLevel.HEALTHY


def enps_kpi(scores: Mapping[str, float]) -> float:
    """eNPS-like KPI: the 1-5 eNPS score mapped onto -10..90, as a whole number."""
    enps = lookup_score(scores, ENPS_CATEGORIES)
    if enps is None:
        return ENPS_DEFAULT_KPI
    return round_score(enps * 20 - 10, places=0)


def assess_burnout(scores: Mapping[str, float]) -> BurnoutRisk:
    """Build the burnout risk card from a result's category scores."""
    categories, default = EXHAUSTION_LOOKUP
    exhaustion = lookup_score(scores, categories, default)
    categories, default = SUPPORT_LOOKUP
    support = lookup_score(scores, categories, default)

    risk = burnout_risk(exhaustion, support)
    alert = risk > ADVISORY_THRESHOLD

    return BurnoutRisk(
        value=risk,
        level=classify_risk(risk),
        exhaustion=exhaustion,
        support=support,
        alert=alert,
        advisory=ADVISORY_ALERT if alert else ADVISORY_STABLE,
    )


def wellbeing_kpi(latest: SurveyResult, previous: Optional[SurveyResult]) -> KPIMetric:
    """Overall wellbeing score with its change versus the previous result."""
    if previous is None:
        return KPIMetric(label="Bienestar General", value=latest.total_score)

    delta = round(latest.total_score - previous.total_score, 2)
    change = None
    if previous.total_score:
        change = round(delta / previous.total_score * 100, 1)

    return KPIMetric(
        label="Bienestar General",
        value=latest.total_score,
        change=change,
        delta=delta,
        is_positive=delta >= 0,
    )


def sort_history(history: Sequence[SurveyResult]) -> list[SurveyResult]:
    """Order results by timestamp ascending, keeping input order for ties."""
    return sorted(history, key=lambda result: result.timestamp)


def derive_dashboard(
    history: Sequence[SurveyResult],
    benchmarks: Mapping[str, float]
) -> DashboardMetrics:
    """Derive all dashboard metrics from a user's result history.

    Args:
        history: The user's results, any order
        benchmarks: Company average per category

    Returns:
        DashboardMetrics for the most recent result

    Raises:
        EmptyHistoryError: If the history is empty
    """
    if not history:
        raise EmptyHistoryError("No results to derive metrics from")

    ordered = sort_history(history)
    latest = ordered[-1]
    previous = ordered[-2] if len(ordered) > 1 else None

    risk = assess_burnout(latest.scores)

    trend = [
        TrendPoint(timestamp=result.timestamp, value=result.total_score)
        for result in ordered
    ]
    radar = [
        RadarPoint(subject=category, value=value, full_mark=RADAR_FULL_MARK)
        for category, value in latest.scores.items()
    ]
    benchmark = [
        BenchmarkPoint(
            name=category,
            user=latest.scores[category],
            company=benchmarks.get(category, DEFAULT_BENCHMARK),
        )
        for category in list(latest.scores)[:BENCHMARK_CATEGORY_LIMIT]
    ]

    logger.debug(
        f"Derived dashboard from {len(ordered)} results: risk={risk.value:.1f} ({risk.level.value})",
        extra={"result_id": latest.id, "user_id": latest.user_id}
    )

    return DashboardMetrics(
        latest_result_id=latest.id,
        burnout_risk=risk,
        wellbeing=wellbeing_kpi(latest, previous),
        enps=KPIMetric(label="eNPS (Lealtad)", value=enps_kpi(latest.scores)),
        trend=trend,
        radar=radar,
        benchmark=benchmark,
    )
