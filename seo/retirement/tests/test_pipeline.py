"""
Test Group G: End-to-end pipeline
"""
from django.test import SimpleTestCase

from seo.retirement import run_analysis
from seo.retirement.datatypes import ContentDocument, ContentMetrics
from seo.retirement.phase2_similarity import calculate_similarity
from seo.retirement.pipeline import AnalysisItem

WEAK_URL = 'https://example.com/guides/dance-shoes'
STRONG_URL = 'https://example.com/blog/dance-shoes'


def _content(url):
    return ContentDocument(
        url=url,
        title='Best Dance Shoes',
        body='how to choose dance shoes for ballroom salsa and tango',
    )


class TestRunAnalysis(SimpleTestCase):

    def test_weaker_duplicate_consolidates_into_stronger(self):
        items = [
            AnalysisItem(WEAK_URL, ContentMetrics(clicks=2, impressions=40), _content(WEAK_URL)),
            AnalysisItem(
                STRONG_URL,
                ContentMetrics(clicks=120, impressions=3000, position=12, ctr=0.04),
                _content(STRONG_URL),
            ),
        ]
        result = run_analysis(items)

        assert len(result.clusters) == 1
        assert result.clusters[0].canonical_url == STRONG_URL

        weak, strong = result.items
        assert weak.decision.action == 'consolidate'
        assert weak.decision.target_url == STRONG_URL
        assert weak.cannibal_similarity > 0.85
        assert weak.cluster_id == 'cluster_0'
        assert weak.rule == 'cannibalization'
        assert strong.decision.action == 'keep'
        assert strong.rule == 'default'
        assert strong.score_result.guards.is_canonical is True

        simulation = result.simulation
        assert simulation.total_urls == 2
        assert sum(simulation.action_breakdown.values()) == simulation.total_urls
        assert simulation.action_breakdown['consolidate'] == 1
        assert simulation.index_bloat_reduction == 50

    def test_items_without_content_are_not_clustered(self):
        items = [
            AnalysisItem('https://example.com/a', ContentMetrics(clicks=40, impressions=900)),
            AnalysisItem('https://example.com/b', ContentMetrics(clicks=40, impressions=900)),
        ]
        result = run_analysis(items)

        assert result.clusters == []
        assert all(item.cluster_id is None for item in result.items)
        assert all(item.cannibal_similarity == 0.0 for item in result.items)

    def test_content_is_keyed_by_item_url(self):
        items = [
            AnalysisItem(WEAK_URL, ContentMetrics(), ContentDocument(url='', body='same words here')),
            AnalysisItem(STRONG_URL, ContentMetrics(clicks=500), ContentDocument(url='', body='same words here')),
        ]
        result = run_analysis(items)

        assert result.clusters[0].urls == [WEAK_URL, STRONG_URL]

    def test_empty_batch(self):
        result = run_analysis([])

        assert result.items == []
        assert result.simulation.total_urls == 0
        assert result.simulation.risk_level == 'low'

    def test_decision_pairs_follow_input_order(self):
        items = [
            AnalysisItem('https://example.com/x', ContentMetrics(backlinks=4)),
            AnalysisItem('https://example.com/y', ContentMetrics(clicks=1, impressions=50, age_months=40)),
        ]
        pairs = run_analysis(items).decisions()

        assert [url for url, _ in pairs] == ['https://example.com/x', 'https://example.com/y']
        assert pairs[0][1].risk == 5

    def test_cannibal_similarity_is_closest_peer(self):
        third_url = 'https://example.com/shop/dance-shoes'
        third = ContentDocument(url=third_url, title='Best Dance Shoes', body=_content(WEAK_URL).body + ' sale')
        items = [
            AnalysisItem(WEAK_URL, ContentMetrics(clicks=2, impressions=40), _content(WEAK_URL)),
            AnalysisItem(STRONG_URL, ContentMetrics(clicks=120, impressions=3000), _content(STRONG_URL)),
            AnalysisItem(third_url, ContentMetrics(clicks=5, impressions=90), third),
        ]
        weak = run_analysis(items).items[0]

        expected = max(
            calculate_similarity(_content(WEAK_URL), _content(STRONG_URL)),
            calculate_similarity(_content(WEAK_URL), third),
        )
        assert weak.cannibal_similarity == expected

    def test_equal_duplicates_do_not_consolidate(self):
        """With identical metrics the page itself wins the tie."""
        metrics = ContentMetrics(clicks=2, impressions=40)
        items = [
            AnalysisItem(WEAK_URL, metrics, _content(WEAK_URL)),
            AnalysisItem(STRONG_URL, metrics, _content(STRONG_URL)),
        ]
        result = run_analysis(items)

        assert len(result.clusters) == 1
        assert [item.decision.action for item in result.items] == ['keep', 'keep']

    def test_rule_is_reported(self):
        item = run_analysis([AnalysisItem('https://example.com/x', ContentMetrics(backlinks=4))]).items[0]
        assert item.to_dict()['rule'] == 'guard_override'
