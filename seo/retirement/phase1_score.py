"""
Phase 1: Zombie Score

Computes a 0-100 retirement-risk score for one URL from its metrics.

Five risk dimensions are scored by threshold tiers (first matching tier wins):
- Traffic: clicks/impressions volume
- Rank: search position, then CTR for page 1 / unranked URLs
- Engagement: bounce rate, time on page, sessions
- Freshness: content age
- No value: missing conversions, backlinks, clicks and impressions

Cannibal risk comes from the caller (similarity to the best competing page).
The weighted sum is then reduced by guard multipliers and clamped.
"""
from typing import Dict, Optional

from .constants import (
    ENGAGEMENT_BASE_RISK,
    ENGAGEMENT_FEW_SESSIONS,
    ENGAGEMENT_FEW_SESSIONS_RISK,
    ENGAGEMENT_HIGH_BOUNCE,
    ENGAGEMENT_HIGH_BOUNCE_RISK,
    ENGAGEMENT_SHORT_VISIT_RISK,
    ENGAGEMENT_SHORT_VISIT_SECONDS,
    FRESHNESS_FLOOR_RISK,
    FRESHNESS_TIERS,
    GUARD_MULTIPLIERS,
    NO_VALUE_LOW_IMPRESSIONS,
    NO_VALUE_LOW_IMPRESSIONS_RISK,
    NO_VALUE_NO_BACKLINKS,
    NO_VALUE_NO_CLICKS,
    NO_VALUE_NO_CONVERSIONS,
    PAGE_ONE_MAX_POSITION,
    RANK_CTR_TIERS,
    RANK_FLOOR_RISK,
    RANK_POSITION_TIERS,
    SCORE_MAX,
    SCORE_MIN,
    TRAFFIC_FLOOR_RISK,
    TRAFFIC_LOW_CLICKS,
    TRAFFIC_LOW_RISK,
    TRAFFIC_TIERS,
    TRAFFIC_ZERO_CLICK_IMPRESSIONS,
    TRAFFIC_ZERO_CLICK_RISK,
)
from .datatypes import ContentMetrics, GuardFlags, ScoreResult, ScoreWeights
from .utils import clamp


def score(
    metrics: ContentMetrics,
    weights: Optional[ScoreWeights] = None,
    cannibal_similarity: float = 0.0,
    is_canonical: bool = False,
) -> ScoreResult:
    """
    Phase 1: Calculate the zombie score for one URL.

    Args:
        metrics: Metrics snapshot for the URL
        weights: Dimension weights (defaults when None)
        cannibal_similarity: 0-1 similarity to the best competing page
        is_canonical: Whether clustering picked this URL as canonical

    Returns:
        ScoreResult with the clamped score, guards and pre-guard breakdown
    """
    weights = weights or ScoreWeights()
    guards = derive_guards(metrics, is_canonical=is_canonical)

    breakdown = {
        'traffic': traffic_risk(metrics),
        'rank': rank_risk(metrics),
        'engagement': engagement_risk(metrics),
        'freshness': freshness_risk(metrics),
        'cannibal': cannibal_similarity * 100,
        'no_value': no_value_risk(metrics),
    }

    raw_score = weighted_score(breakdown, weights)
    final_score = apply_guards(raw_score, guards)

    return ScoreResult(
        score=clamp(final_score, SCORE_MIN, SCORE_MAX),
        guards=guards,
        breakdown=breakdown,
    )


def derive_guards(metrics: ContentMetrics, is_canonical: bool = False) -> GuardFlags:
    return GuardFlags(
        has_backlinks=metrics.backlinks > 0,
        has_conversions=metrics.conversions > 0,
        has_page1_ranking=0 < metrics.position <= PAGE_ONE_MAX_POSITION,
        has_recent_traffic=metrics.clicks > 0 or metrics.impressions > 0,
        is_canonical=is_canonical,
    )


def weighted_score(breakdown: Dict[str, float], weights: ScoreWeights) -> float:
    return (
        weights.traffic * breakdown['traffic']
        + weights.rank * breakdown['rank']
        + weights.engagement * breakdown['engagement']
        + weights.freshness * breakdown['freshness']
        + weights.cannibal * breakdown['cannibal']
        + weights.no_value * breakdown['no_value']
    )


def apply_guards(raw_score: float, guards: GuardFlags) -> float:
    """Multiply the score down once per active guard."""
    result = raw_score
    for flag, multiplier in GUARD_MULTIPLIERS:
        if getattr(guards, flag):
            result *= multiplier
    return result


def traffic_risk(metrics: ContentMetrics) -> int:
    if metrics.clicks == 0 and metrics.impressions < TRAFFIC_ZERO_CLICK_IMPRESSIONS:
        return TRAFFIC_ZERO_CLICK_RISK

    for max_clicks, max_impressions, risk in TRAFFIC_TIERS:
        if metrics.clicks < max_clicks and metrics.impressions < max_impressions:
            return risk

    if metrics.clicks < TRAFFIC_LOW_CLICKS:
        return TRAFFIC_LOW_RISK

    return TRAFFIC_FLOOR_RISK


def rank_risk(metrics: ContentMetrics) -> int:
    """Deep positions score on position alone; page 1 and unranked fall through to CTR."""
    for min_position, risk in RANK_POSITION_TIERS:
        if metrics.position > min_position:
            return risk

    for max_ctr, risk in RANK_CTR_TIERS:
        if metrics.ctr < max_ctr:
            return risk

    return RANK_FLOOR_RISK


def engagement_risk(metrics: ContentMetrics) -> int:
    # Absent or zero signals add nothing
    risk = ENGAGEMENT_BASE_RISK

    if metrics.bounce_rate and metrics.bounce_rate > ENGAGEMENT_HIGH_BOUNCE:
        risk += ENGAGEMENT_HIGH_BOUNCE_RISK
    if metrics.avg_time_on_page and metrics.avg_time_on_page < ENGAGEMENT_SHORT_VISIT_SECONDS:
        risk += ENGAGEMENT_SHORT_VISIT_RISK
    if metrics.sessions and metrics.sessions < ENGAGEMENT_FEW_SESSIONS:
        risk += ENGAGEMENT_FEW_SESSIONS_RISK

    return min(100, risk)


def freshness_risk(metrics: ContentMetrics) -> int:
    for min_age, risk in FRESHNESS_TIERS:
        if metrics.age_months > min_age:
            return risk
    return FRESHNESS_FLOOR_RISK


def no_value_risk(metrics: ContentMetrics) -> int:
    risk = 0

    if metrics.conversions == 0:
        risk += NO_VALUE_NO_CONVERSIONS
    if metrics.backlinks == 0:
        risk += NO_VALUE_NO_BACKLINKS
    if metrics.clicks == 0:
        risk += NO_VALUE_NO_CLICKS
    if metrics.impressions < NO_VALUE_LOW_IMPRESSIONS:
        risk += NO_VALUE_LOW_IMPRESSIONS_RISK

    return min(100, risk)
