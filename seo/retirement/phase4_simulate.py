"""
Phase 4: What-If Simulation

Projects the aggregate effect of a decision batch before anything is applied:
- Action breakdown (all five actions, zero-filled)
- Index bloat reduction (% of URLs leaving the index)
- Crawl budget reclaimed (pruned + half of consolidated)
- Traffic shift (clicks carried over by consolidate/redirect/refresh)
- Risk analysis: high risk URLs, potential click loss, risk level
- Rollback plan

Order of the batch does not matter.
"""
import logging
from collections import Counter
from typing import Dict, Iterable, List

from .constants import (
    ACTION_CONSOLIDATE,
    ACTION_KEEP,
    ACTION_PRUNE,
    ACTION_REDIRECT,
    ACTION_TYPES,
    CONSOLIDATE_CRAWL_FACTOR,
    CRAWL_BUDGET_IMPRESSIONS_DIVISOR,
    CRAWL_BUDGET_MAX,
    CRAWL_BUDGET_MIN,
    HIGH_RISK_THRESHOLD,
    INDEX_REMOVING_ACTIONS,
    PRUNE_LOSS_RISK_THRESHOLD,
    REDIRECT_LOSS_FACTOR,
    REDIRECT_LOSS_RISK_THRESHOLD,
    RISK_LEVEL_LOW_MAX_LOSS,
    RISK_LEVEL_MEDIUM_MAX_HIGH_RISK,
    RISK_LEVEL_MEDIUM_MAX_LOSS,
    TRAFFIC_RETENTION,
)
from .datatypes import ContentMetrics, PlannedAction, SimulationReport
from .utils import clamp, round_half_up

logger = logging.getLogger(__name__)


def simulate(planned_actions: Iterable[PlannedAction]) -> SimulationReport:
    """
    Phase 4: Simulate a decision batch.

    Args:
        planned_actions: One PlannedAction per URL

    Returns:
        SimulationReport; an empty batch yields a zero-valued report
    """
    actions = list(planned_actions)
    breakdown = action_breakdown(actions)

    high_risk_urls = [a.url for a in actions if a.risk > HIGH_RISK_THRESHOLD]
    potential_loss = calculate_potential_loss(actions)

    report = SimulationReport(
        total_urls=len(actions),
        actions_to_apply=sum(1 for a in actions if a.action != ACTION_KEEP),
        action_breakdown=breakdown,
        index_bloat_reduction=calculate_index_bloat_reduction(breakdown, len(actions)),
        crawl_budget_reclaimed=calculate_crawl_budget_reclaimed(actions),
        traffic_shift=calculate_traffic_shift(actions),
        risk_level=determine_risk_level(len(high_risk_urls), potential_loss),
        high_risk_urls=high_risk_urls,
        potential_loss=potential_loss,
        rollback_plan=generate_rollback_plan(breakdown),
    )

    logger.info(
        f"Simulated {report.total_urls} URLs: {report.actions_to_apply} actions, "
        f"risk level {report.risk_level}"
    )

    return report


def action_breakdown(actions: List[PlannedAction]) -> Dict[str, int]:
    counts = Counter(a.action for a in actions)
    return {action: counts.get(action, 0) for action in ACTION_TYPES}


def calculate_index_bloat_reduction(breakdown: Dict[str, int], total: int) -> int:
    """Percentage of URLs that prune, redirect or consolidate removes from the index."""
    if total == 0:
        return 0
    removed = sum(breakdown[action] for action in INDEX_REMOVING_ACTIONS)
    return round_half_up(removed / total * 100)


def estimate_crawl_budget(metrics: ContentMetrics) -> float:
    """Impressions stand in for crawl frequency; bounded to 10-100 requests."""
    return clamp(
        metrics.impressions / CRAWL_BUDGET_IMPRESSIONS_DIVISOR,
        CRAWL_BUDGET_MIN,
        CRAWL_BUDGET_MAX,
    )


def calculate_crawl_budget_reclaimed(actions: List[PlannedAction]) -> int:
    reclaimed = 0.0

    for a in actions:
        if a.action == ACTION_PRUNE:
            reclaimed += estimate_crawl_budget(a.metrics)
        elif a.action == ACTION_CONSOLIDATE:
            reclaimed += estimate_crawl_budget(a.metrics) * CONSOLIDATE_CRAWL_FACTOR

    return round_half_up(reclaimed)


def calculate_traffic_shift(actions: List[PlannedAction]) -> int:
    shift = 0.0

    for a in actions:
        retention = TRAFFIC_RETENTION.get(a.action)
        if retention is not None:
            shift += a.metrics.clicks * retention

    return round_half_up(shift)


def calculate_potential_loss(actions: List[PlannedAction]) -> int:
    loss = 0.0

    for a in actions:
        if a.action == ACTION_PRUNE and a.risk > PRUNE_LOSS_RISK_THRESHOLD:
            loss += a.metrics.clicks
        elif a.action == ACTION_REDIRECT and a.risk > REDIRECT_LOSS_RISK_THRESHOLD:
            loss += a.metrics.clicks * REDIRECT_LOSS_FACTOR

    return round_half_up(loss)


def determine_risk_level(high_risk_count: int, potential_loss: int) -> str:
    if high_risk_count == 0 and potential_loss < RISK_LEVEL_LOW_MAX_LOSS:
        return 'low'
    if high_risk_count < RISK_LEVEL_MEDIUM_MAX_HIGH_RISK and potential_loss < RISK_LEVEL_MEDIUM_MAX_LOSS:
        return 'medium'
    return 'high'


def generate_rollback_plan(breakdown: Dict[str, int]) -> str:
    """
    Semicolon-joined undo steps; actions with no URLs are left out.

    Example:
        'Restore 2 pruned URLs to index; Remove 1 redirect rules'
    """
    steps = []

    if breakdown[ACTION_PRUNE]:
        steps.append(f"Restore {breakdown[ACTION_PRUNE]} pruned URLs to index")
    if breakdown[ACTION_REDIRECT]:
        steps.append(f"Remove {breakdown[ACTION_REDIRECT]} redirect rules")
    if breakdown[ACTION_CONSOLIDATE]:
        steps.append(f"Restore {breakdown[ACTION_CONSOLIDATE]} consolidated URLs")

    return '; '.join(steps)
