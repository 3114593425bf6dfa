"""
Content Retirement Pipeline Orchestrator

Runs all 4 phases over one batch of URLs:
1. Phase 2: Cluster near-duplicate content (needs content documents)
2. Phase 1: Zombie score per URL, fed with each URL's cluster similarity
3. Phase 3: Action decision per URL
4. Phase 4: Simulate the whole batch

Clustering runs first because the score needs each URL's similarity to its
strongest competitor. Nothing is fetched, stored or applied here.

Main entry point: run_analysis(items, weights=None)
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from . import phase1_score
from . import phase2_similarity
from . import phase3_decide
from . import phase4_simulate
from .datatypes import (
    ActionDecision,
    ContentDocument,
    ContentMetrics,
    PlannedAction,
    ScoreResult,
    ScoreWeights,
    SimilarityCluster,
    SimulationReport,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisItem:
    url: str
    metrics: ContentMetrics
    content: Optional[ContentDocument] = None


@dataclass(frozen=True)
class ItemResult:
    url: str
    metrics: ContentMetrics
    score_result: ScoreResult
    decision: ActionDecision
    cluster_id: Optional[str] = None
    cannibal_similarity: float = 0.0
    rule: str = 'default'

    def to_dict(self) -> Dict:
        return {
            'url': self.url,
            'zombie_score': self.score_result.score,
            'guards': self.score_result.guards.to_dict(),
            'breakdown': dict(self.score_result.breakdown),
            'cluster_id': self.cluster_id,
            'cannibal_similarity': self.cannibal_similarity,
            'decision': self.decision.to_dict(),
            'rule': self.rule,
        }


@dataclass
class AnalysisResult:
    items: List[ItemResult] = field(default_factory=list)
    clusters: List[SimilarityCluster] = field(default_factory=list)
    simulation: Optional[SimulationReport] = None

    def decisions(self):
        return [(item.url, item.decision) for item in self.items]


@dataclass(frozen=True)
class _ClusterContext:
    cluster: SimilarityCluster
    cannibal_similarity: float
    similar_urls: tuple


def run_analysis(items: List[AnalysisItem], weights: Optional[ScoreWeights] = None) -> AnalysisResult:
    """
    Run the complete retirement analysis for a batch.

    Args:
        items: URLs with metrics and optional content
        weights: Zombie score weights (defaults when None)

    Returns:
        AnalysisResult with per-URL decisions, clusters and the simulation report
    """
    weights = weights or ScoreWeights()
    logger.info(f"Running retirement analysis for {len(items)} URLs")

    # =====================================================================
    # PHASE 2: Clustering
    # =====================================================================
    documents = [_document_for(item) for item in items if item.content is not None]
    clusters = phase2_similarity.detect_clusters(documents)
    cluster_contexts = _build_cluster_contexts(clusters, documents, items)

    # =====================================================================
    # PHASE 1 + 3: Score and decide per URL
    # =====================================================================
    results = []
    for item in items:
        results.append(_analyze_item(item, weights, cluster_contexts.get(item.url)))

    # =====================================================================
    # PHASE 4: Simulation
    # =====================================================================
    simulation = phase4_simulate.simulate(
        PlannedAction.from_decision(r.url, r.decision, r.metrics) for r in results
    )

    logger.info(
        f"Retirement analysis complete: {len(clusters)} clusters, "
        f"{simulation.actions_to_apply} actions, breakdown {simulation.action_breakdown}"
    )

    return AnalysisResult(items=results, clusters=clusters, simulation=simulation)


def _analyze_item(
    item: AnalysisItem,
    weights: ScoreWeights,
    cluster_context: Optional[_ClusterContext],
) -> ItemResult:
    cannibal_similarity = 0.0
    similar_urls = ()
    cluster_id = None
    canonical_url = None

    if cluster_context is not None:
        cannibal_similarity = cluster_context.cannibal_similarity
        similar_urls = cluster_context.similar_urls
        cluster_id = cluster_context.cluster.id
        canonical_url = cluster_context.cluster.canonical_url

    score_result = phase1_score.score(
        item.metrics,
        weights=weights,
        cannibal_similarity=cannibal_similarity,
        is_canonical=canonical_url == item.url,
    )

    rule, decision = phase3_decide.decide_with_rule(phase3_decide.DecisionContext(
        url=item.url,
        metrics=item.metrics,
        score_result=score_result,
        cannibal_similarity=cannibal_similarity,
        similar_urls=similar_urls,
        cluster_id=cluster_id,
        canonical_url=canonical_url,
    ))

    return ItemResult(
        url=item.url,
        metrics=item.metrics,
        score_result=score_result,
        decision=decision,
        cluster_id=cluster_id,
        cannibal_similarity=cannibal_similarity,
        rule=rule,
    )


def _document_for(item: AnalysisItem) -> ContentDocument:
    """Content documents are keyed by the item URL."""
    if item.content.url == item.url:
        return item.content
    return ContentDocument(
        url=item.url,
        title=item.content.title,
        body=item.content.body,
        meta_description=item.content.meta_description,
        headings=item.content.headings,
    )


def _build_cluster_contexts(
    clusters: List[SimilarityCluster],
    documents: List[ContentDocument],
    items: List[AnalysisItem],
) -> Dict[str, _ClusterContext]:
    """
    For every clustered URL: its similarity to the closest other member and
    its consolidation candidates (itself first, then peers most similar first).
    """
    docs_by_url = {doc.url: doc for doc in documents}
    metrics_by_url = {item.url: item.metrics for item in items}
    contexts = {}

    for cluster in clusters:
        members = [docs_by_url[url] for url in cluster.urls]

        for member in members:
            peers = phase2_similarity.similar_documents(member, members)

            candidates = [phase3_decide.SimilarUrl(member.url, 1.0, metrics_by_url[member.url])]
            candidates.extend(
                phase3_decide.SimilarUrl(peer.url, similarity, metrics_by_url[peer.url])
                for peer, similarity in peers
            )

            contexts[member.url] = _ClusterContext(
                cluster=cluster,
                cannibal_similarity=peers[0][1] if peers else 0.0,
                similar_urls=tuple(candidates),
            )

    return contexts
