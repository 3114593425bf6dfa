"""
Phase 2: Near-Duplicate Clustering

Pairwise similarity is a weighted blend of four Jaccard similarities:
- Title tokens (0.3)
- Body tokens (0.4)
- Heading set (0.2)
- URL path segments (0.1)

Clustering is greedy and seed-order sensitive: each unassigned document in
input order seeds a cluster and takes every later unassigned document whose
similarity to the seed exceeds 0.7. A later document may land in an earlier
seed's cluster even when another grouping would be tighter.
"""
import logging
from typing import List, Optional, Set, Tuple

from .constants import CLUSTER_SIMILARITY_THRESHOLD, SIMILARITY_WEIGHTS
from .datatypes import ContentDocument, SimilarityCluster
from .utils import get_path, get_path_segments, has_query_string, jaccard, lower_set, tokenize

logger = logging.getLogger(__name__)


def detect_clusters(
    documents: List[ContentDocument],
    assigned: Optional[Set[str]] = None,
) -> List[SimilarityCluster]:
    """
    Phase 2: Group near-duplicate documents.

    Args:
        documents: Documents in priority order (earlier documents seed first)
        assigned: URLs already placed in a cluster. Updated in place so callers
            chunking a large batch can carry assignment across calls.

    Returns:
        Clusters with at least two members, each with a canonical URL
    """
    if assigned is None:
        assigned = set()

    clusters = []

    for i, seed in enumerate(documents):
        if seed.url in assigned:
            continue

        members = _collect_members(i, documents, assigned)
        assigned.add(seed.url)

        if len(members) < 2:
            continue

        cluster = SimilarityCluster(
            id=f"cluster_{len(clusters)}",
            urls=[url for url, _ in members],
            similarity=1.0,
            member_similarity=dict(members),
        )
        cluster.canonical_url = find_canonical_url(cluster.urls)
        clusters.append(cluster)

    logger.debug(f"Clustered {len(documents)} documents into {len(clusters)} clusters")

    return clusters


def _collect_members(
    seed_index: int,
    documents: List[ContentDocument],
    assigned: Set[str],
) -> List[Tuple[str, float]]:
    """Scan every later unassigned document against one seed, marking matches assigned."""
    seed = documents[seed_index]
    members = [(seed.url, 1.0)]

    for candidate in documents[seed_index + 1:]:
        if candidate.url in assigned:
            continue

        similarity = calculate_similarity(seed, candidate)
        if similarity > CLUSTER_SIMILARITY_THRESHOLD:
            members.append((candidate.url, similarity))
            assigned.add(candidate.url)

    return members


def calculate_similarity(doc1: ContentDocument, doc2: ContentDocument) -> float:
    """Weighted similarity between two documents (0.0 - 1.0)."""
    return (
        title_similarity(doc1, doc2) * SIMILARITY_WEIGHTS['title']
        + body_similarity(doc1, doc2) * SIMILARITY_WEIGHTS['body']
        + heading_similarity(doc1, doc2) * SIMILARITY_WEIGHTS['headings']
        + url_similarity(doc1.url, doc2.url) * SIMILARITY_WEIGHTS['url']
    )


def title_similarity(doc1: ContentDocument, doc2: ContentDocument) -> float:
    return jaccard(tokenize(doc1.title), tokenize(doc2.title))


def body_similarity(doc1: ContentDocument, doc2: ContentDocument) -> float:
    return jaccard(tokenize(doc1.body), tokenize(doc2.body))


def heading_similarity(doc1: ContentDocument, doc2: ContentDocument) -> float:
    """Headings compare as whole strings, not tokens."""
    return jaccard(lower_set(doc1.headings), lower_set(doc2.headings))


def url_similarity(url1: str, url2: str) -> float:
    """
    Jaccard similarity of URL path segments.
    A malformed URL on either side contributes 0.

    Example:
        https://a.com/blog/dance-shoes/ vs https://a.com/shop/dance-shoes/
        → 1/3
    """
    segments1 = get_path_segments(url1)
    segments2 = get_path_segments(url2)

    if segments1 is None or segments2 is None:
        return 0.0

    return jaccard(set(segments1), set(segments2))


def similar_documents(
    target: ContentDocument,
    documents: List[ContentDocument],
    threshold: float = 0.0,
) -> List[Tuple[ContentDocument, float]]:
    """
    Every other document whose similarity to `target` exceeds `threshold`,
    most similar first.
    """
    matches = []
    for doc in documents:
        if doc.url == target.url:
            continue
        similarity = calculate_similarity(target, doc)
        if similarity > threshold:
            matches.append((doc, similarity))

    matches.sort(key=lambda m: -m[1])
    return matches


def find_canonical_url(urls: List[str]) -> Optional[str]:
    """
    Pick the canonical URL of a cluster by a left-to-right fold.

    A strictly shorter path wins. On equal path length, if exactly one of
    the two has a query string, the one without wins. Otherwise the current
    canonical is kept.
    """
    if not urls:
        return None

    canonical = urls[0]
    for current in urls[1:]:
        current_path = get_path(current)
        canonical_path = get_path(canonical)

        if len(current_path) < len(canonical_path):
            canonical = current
        elif len(current_path) == len(canonical_path):
            if not has_query_string(current) and has_query_string(canonical):
                canonical = current

    return canonical
