"""
Phase 3: Action Decision

Picks exactly one action per URL with an ordered rule cascade.
First matching rule wins; later rules are never evaluated.

Rule order:
1. guard_override: backlinks, conversions or page 1 ranking → KEEP
2. cannibalization: >85% similar to a better page → CONSOLIDATE
3. refresh: mid score, some traffic, aged content → REFRESH
4. redirect: high score, thin traffic, parent URL derivable → REDIRECT
5. prune: very high score, no traffic or value signals → PRUNE
6. default → KEEP

Risk and confidence per rule are fixed constants.
A rule whose builder returns None falls through to the next rule.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .constants import (
    BRIEF_DECLINING_CLICKS,
    BRIEF_LOW_CTR,
    BRIEF_OUTDATED_AGE_MONTHS,
    BRIEF_POOR_RANK_POSITION,
    CANNIBAL_SIMILARITY_THRESHOLD,
    DECISION_VALUES,
    PRUNE_MAX_CLICKS,
    PRUNE_MAX_IMPRESSIONS,
    PRUNE_SCORE_MIN,
    REDIRECT_MAX_CLICKS,
    REDIRECT_MAX_IMPRESSIONS,
    REDIRECT_SCORE_MIN,
    REFRESH_MIN_AGE_MONTHS,
    REFRESH_MIN_CLICKS,
    REFRESH_MIN_IMPRESSIONS,
    REFRESH_SCORE_MAX,
    REFRESH_SCORE_MIN,
)
from .datatypes import (
    ActionDecision,
    ConsolidateDecision,
    ContentMetrics,
    KeepDecision,
    PruneDecision,
    RedirectDecision,
    RefreshDecision,
    ScoreResult,
)
from .utils import get_parent_url, get_topic, round_half_up

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimilarUrl:
    url: str
    similarity: float
    metrics: ContentMetrics


@dataclass(frozen=True)
class DecisionContext:
    url: str
    metrics: ContentMetrics
    score_result: ScoreResult
    cannibal_similarity: float = 0.0
    similar_urls: Tuple[SimilarUrl, ...] = ()
    cluster_id: Optional[str] = None
    canonical_url: Optional[str] = None

    @property
    def score(self) -> float:
        return self.score_result.score

    @property
    def guards(self):
        return self.score_result.guards


# =============================================================================
# RULES
# =============================================================================

def _is_protected(ctx: DecisionContext) -> bool:
    return ctx.guards.protects_content


def _keep_protected(ctx: DecisionContext) -> ActionDecision:
    risk, confidence = DECISION_VALUES['guard_override']
    return KeepDecision(
        rationale='High-value content with backlinks, conversions, or Page 1 rankings',
        risk=risk,
        confidence=confidence,
    )


def _is_cannibalized(ctx: DecisionContext) -> bool:
    return ctx.cannibal_similarity > CANNIBAL_SIMILARITY_THRESHOLD and len(ctx.similar_urls) > 0


def _consolidate(ctx: DecisionContext) -> Optional[ActionDecision]:
    best = find_best_canonical(ctx.similar_urls)
    if best.url == ctx.url:
        return None

    risk, confidence = DECISION_VALUES['cannibalization']
    percent = round_half_up(ctx.cannibal_similarity * 100)
    return ConsolidateDecision(
        rationale=f"High cannibalization similarity ({percent}%) with better performing content",
        risk=risk,
        confidence=confidence,
        target_url=best.url,
    )


def _needs_refresh(ctx: DecisionContext) -> bool:
    m = ctx.metrics
    return (
        REFRESH_SCORE_MIN < ctx.score < REFRESH_SCORE_MAX
        and (m.clicks > REFRESH_MIN_CLICKS or m.impressions > REFRESH_MIN_IMPRESSIONS)
        and m.age_months > REFRESH_MIN_AGE_MONTHS
    )


def _refresh(ctx: DecisionContext) -> ActionDecision:
    risk, confidence = DECISION_VALUES['refresh']
    return RefreshDecision(
        rationale='Content shows decline but has historical value - good candidate for refresh',
        risk=risk,
        confidence=confidence,
        refresh_brief=generate_refresh_brief(ctx.metrics, ctx.url),
    )


def _is_redirect_candidate(ctx: DecisionContext) -> bool:
    m = ctx.metrics
    return (
        ctx.score > REDIRECT_SCORE_MIN
        and m.clicks < REDIRECT_MAX_CLICKS
        and m.impressions < REDIRECT_MAX_IMPRESSIONS
        and not ctx.guards.has_backlinks
    )


def _redirect(ctx: DecisionContext) -> Optional[ActionDecision]:
    target = get_parent_url(ctx.url)
    if target is None:
        return None

    risk, confidence = DECISION_VALUES['redirect']
    return RedirectDecision(
        rationale='Thin content with low value - redirect to relevant parent/category',
        risk=risk,
        confidence=confidence,
        target_url=target,
    )


def _is_prune_candidate(ctx: DecisionContext) -> bool:
    m = ctx.metrics
    return (
        ctx.score > PRUNE_SCORE_MIN
        and m.clicks < PRUNE_MAX_CLICKS
        and m.impressions < PRUNE_MAX_IMPRESSIONS
        and not ctx.guards.has_backlinks
        and not ctx.guards.has_conversions
    )


def _prune(ctx: DecisionContext) -> ActionDecision:
    risk, confidence = DECISION_VALUES['prune']
    return PruneDecision(
        rationale='Very low value content with no traffic, backlinks, or conversions',
        risk=risk,
        confidence=confidence,
    )


def _always(ctx: DecisionContext) -> bool:
    return True


def _keep_default(ctx: DecisionContext) -> ActionDecision:
    risk, confidence = DECISION_VALUES['default']
    return KeepDecision(
        rationale='Content meets minimum value thresholds',
        risk=risk,
        confidence=confidence,
    )


Rule = Tuple[str, Callable[[DecisionContext], bool], Callable[[DecisionContext], Optional[ActionDecision]]]

DECISION_RULES: List[Rule] = [
    ('guard_override', _is_protected, _keep_protected),
    ('cannibalization', _is_cannibalized, _consolidate),
    ('refresh', _needs_refresh, _refresh),
    ('redirect', _is_redirect_candidate, _redirect),
    ('prune', _is_prune_candidate, _prune),
    ('default', _always, _keep_default),
]


def decide(context: DecisionContext, rules: Optional[List[Rule]] = None) -> ActionDecision:
    """
    Phase 3: Run the rule cascade for one URL.

    Args:
        context: Metrics, score result and cannibalization data for the URL
        rules: Rule list override (defaults to DECISION_RULES)

    Returns:
        The decision of the first rule that matches and builds one
    """
    return decide_with_rule(context, rules)[1]


def decide_with_rule(
    context: DecisionContext,
    rules: Optional[List[Rule]] = None,
) -> Tuple[str, ActionDecision]:
    """Same as decide(), also naming the rule that produced the decision."""
    for name, predicate, build in rules or DECISION_RULES:
        if not predicate(context):
            continue

        decision = build(context)
        if decision is not None:
            return name, decision

        logger.debug(f"Rule '{name}' matched {context.url} but produced no action; falling through")

    # DECISION_RULES ends with an unconditional default
    return 'default', _keep_default(context)


# =============================================================================
# HELPERS
# =============================================================================

def canonical_score(metrics: ContentMetrics) -> float:
    """
    Rank competing URLs for consolidation.

    Formula: 2*clicks + 0.1*impressions + 5*(21 - position) if ranked
             + 50*conversions + 10*backlinks + 1000*ctr
    """
    value = 0.0

    value += metrics.clicks * 2
    value += metrics.impressions * 0.1

    if metrics.position > 0:
        value += (21 - metrics.position) * 5

    value += metrics.conversions * 50
    value += metrics.backlinks * 10

    value += metrics.ctr * 1000

    return value


def find_best_canonical(similar_urls) -> SimilarUrl:
    """Highest canonical score wins; ties keep the earlier candidate."""
    best = similar_urls[0]
    best_score = canonical_score(best.metrics)

    for candidate in similar_urls[1:]:
        candidate_score = canonical_score(candidate.metrics)
        if candidate_score > best_score:
            best, best_score = candidate, candidate_score

    return best


def generate_refresh_brief(metrics: ContentMetrics, url: str) -> str:
    """
    Describe what a refresh should address.

    Example:
        'Refresh dance shoes content addressing: poor rankings, outdated content.
        Focus on improving topical authority and user engagement.'
    """
    issues = []

    if metrics.position > BRIEF_POOR_RANK_POSITION:
        issues.append('poor rankings')
    if metrics.ctr < BRIEF_LOW_CTR:
        issues.append('low click-through rate')
    if metrics.clicks < BRIEF_DECLINING_CLICKS:
        issues.append('declining traffic')
    if metrics.age_months > BRIEF_OUTDATED_AGE_MONTHS:
        issues.append('outdated content')

    topic = get_topic(url)
    addressing = ', '.join(issues) if issues else 'overall content quality'

    return (
        f"Refresh {topic} content addressing: {addressing}. "
        f"Focus on improving topical authority and user engagement."
    )
