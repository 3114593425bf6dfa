"""
Value types shared by the retirement engine phases.

Everything here is an immutable snapshot produced once per run. Nothing is
persisted; the API layer renders these with `to_dict()`.
"""
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import ClassVar, Dict, List, Optional, Tuple

from .constants import (
    ACTION_CONSOLIDATE,
    ACTION_KEEP,
    ACTION_PRUNE,
    ACTION_REDIRECT,
    ACTION_REFRESH,
    ACTION_TYPES,
    DEFAULT_WEIGHTS,
)


@dataclass(frozen=True)
class ContentMetrics:
    """Traffic, ranking and engagement snapshot for one URL."""
    clicks: float = 0
    impressions: float = 0
    position: float = 0  # 0 = not ranked
    ctr: float = 0.0
    conversions: float = 0
    backlinks: float = 0
    age_months: float = 0
    sessions: Optional[float] = None
    bounce_rate: Optional[float] = None
    avg_time_on_page: Optional[float] = None
    last_updated: Optional[datetime] = None

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, (int, float)) and value < 0:
                raise ValueError(f"ContentMetrics.{f.name} must be non-negative, got {value}")

    @classmethod
    def from_dict(cls, data: Dict) -> 'ContentMetrics':
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> Dict:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        if self.last_updated is not None:
            data['last_updated'] = self.last_updated.isoformat()
        return data


@dataclass(frozen=True)
class GuardFlags:
    has_backlinks: bool = False
    has_conversions: bool = False
    has_page1_ranking: bool = False
    has_recent_traffic: bool = False
    is_canonical: bool = False

    @property
    def protects_content(self) -> bool:
        """Backlinks, conversions or a page-1 ranking block any downgrade."""
        return self.has_backlinks or self.has_conversions or self.has_page1_ranking

    def to_dict(self) -> Dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class ScoreWeights:
    traffic: float = DEFAULT_WEIGHTS['traffic']
    rank: float = DEFAULT_WEIGHTS['rank']
    engagement: float = DEFAULT_WEIGHTS['engagement']
    freshness: float = DEFAULT_WEIGHTS['freshness']
    cannibal: float = DEFAULT_WEIGHTS['cannibal']
    no_value: float = DEFAULT_WEIGHTS['no_value']

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> 'ScoreWeights':
        """Build weights from a partial mapping; missing keys keep their defaults."""
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        return cls(**{k: float(v) for k, v in data.items() if k in known})

    def to_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class ScoreResult:
    score: float
    guards: GuardFlags
    breakdown: Dict[str, float]

    def to_dict(self) -> Dict:
        return {
            'score': self.score,
            'guards': self.guards.to_dict(),
            'breakdown': dict(self.breakdown),
        }


@dataclass(frozen=True)
class ContentDocument:
    url: str
    title: str = ''
    body: str = ''
    meta_description: Optional[str] = None
    headings: Tuple[str, ...] = ()


@dataclass
class SimilarityCluster:
    """
    Group of near-duplicate URLs.

    `urls[0]` is the seed. `member_similarity` holds each member's similarity
    to the seed (the seed itself is 1.0).
    """
    id: str
    urls: List[str]
    similarity: float = 1.0
    canonical_url: Optional[str] = None
    member_similarity: Dict[str, float] = field(default_factory=dict)

    @property
    def seed(self) -> str:
        return self.urls[0]

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'urls': list(self.urls),
            'seed': self.seed,
            'similarity': self.similarity,
            'canonical_url': self.canonical_url,
            'member_similarity': dict(self.member_similarity),
        }


# =============================================================================
# ACTION DECISIONS (one class per action)
# =============================================================================

@dataclass(frozen=True)
class ActionDecision:
    action: ClassVar[str] = ''

    rationale: str
    risk: int
    confidence: int

    def to_dict(self) -> Dict:
        data = {
            'action': self.action,
            'rationale': self.rationale,
            'risk': self.risk,
            'confidence': self.confidence,
        }
        for f in fields(self):
            if f.name not in data:
                data[f.name] = getattr(self, f.name)
        return data


@dataclass(frozen=True)
class KeepDecision(ActionDecision):
    action: ClassVar[str] = ACTION_KEEP


@dataclass(frozen=True)
class RefreshDecision(ActionDecision):
    action: ClassVar[str] = ACTION_REFRESH

    refresh_brief: str = ''


@dataclass(frozen=True)
class ConsolidateDecision(ActionDecision):
    action: ClassVar[str] = ACTION_CONSOLIDATE

    target_url: str = ''


@dataclass(frozen=True)
class PruneDecision(ActionDecision):
    action: ClassVar[str] = ACTION_PRUNE


@dataclass(frozen=True)
class RedirectDecision(ActionDecision):
    action: ClassVar[str] = ACTION_REDIRECT

    target_url: str = ''


# =============================================================================
# SIMULATION
# =============================================================================

@dataclass(frozen=True)
class PlannedAction:
    """One row of a simulation batch."""
    url: str
    action: str
    risk: float
    metrics: ContentMetrics
    rationale: str = ''

    def __post_init__(self):
        if self.action not in ACTION_TYPES:
            raise ValueError(f"Unknown action '{self.action}'")

    @classmethod
    def from_decision(cls, url: str, decision: ActionDecision, metrics: ContentMetrics) -> 'PlannedAction':
        return cls(
            url=url,
            action=decision.action,
            risk=decision.risk,
            metrics=metrics,
            rationale=decision.rationale,
        )


@dataclass(frozen=True)
class SimulationReport:
    total_urls: int
    actions_to_apply: int
    action_breakdown: Dict[str, int]
    index_bloat_reduction: int
    crawl_budget_reclaimed: int
    traffic_shift: int
    risk_level: str
    high_risk_urls: List[str]
    potential_loss: int
    rollback_plan: str

    def to_dict(self) -> Dict:
        return {
            'total_urls': self.total_urls,
            'actions_to_apply': self.actions_to_apply,
            'projected_impact': {
                'index_bloat_reduction': self.index_bloat_reduction,
                'crawl_budget_reclaimed': self.crawl_budget_reclaimed,
                'traffic_shift': self.traffic_shift,
                'risk_level': self.risk_level,
            },
            'action_breakdown': dict(self.action_breakdown),
            'risk_analysis': {
                'high_risk_urls': list(self.high_risk_urls),
                'potential_loss': self.potential_loss,
                'rollback_plan': self.rollback_plan,
            },
        }
