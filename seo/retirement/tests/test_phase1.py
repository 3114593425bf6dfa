"""
Test Group A: Phase 1 Zombie Score

Tests tier boundaries per risk dimension, weighting, guard multipliers and clamping.
"""
from django.test import SimpleTestCase

from seo.retirement.datatypes import ContentMetrics, GuardFlags, ScoreWeights
from seo.retirement.phase1_score import (
    apply_guards,
    derive_guards,
    engagement_risk,
    freshness_risk,
    no_value_risk,
    rank_risk,
    score,
    traffic_risk,
    weighted_score,
)


class TestTrafficRisk(SimpleTestCase):

    def test_tiers(self):
        cases = [
            (ContentMetrics(clicks=0, impressions=50), 90),
            (ContentMetrics(clicks=0, impressions=150), 70),
            (ContentMetrics(clicks=4, impressions=499), 70),
            (ContentMetrics(clicks=10, impressions=800), 50),
            (ContentMetrics(clicks=10, impressions=5000), 30),
            (ContentMetrics(clicks=99, impressions=50000), 30),
            (ContentMetrics(clicks=500, impressions=50000), 10),
        ]
        for metrics, expected in cases:
            assert traffic_risk(metrics) == expected, f"{metrics} should score {expected}"


class TestRankRisk(SimpleTestCase):

    def test_position_tiers(self):
        assert rank_risk(ContentMetrics(position=60)) == 90
        assert rank_risk(ContentMetrics(position=40)) == 70
        assert rank_risk(ContentMetrics(position=25)) == 50
        assert rank_risk(ContentMetrics(position=15)) == 30

    def test_page_one_falls_through_to_ctr(self):
        assert rank_risk(ContentMetrics(position=5, ctr=0.005)) == 80
        assert rank_risk(ContentMetrics(position=5, ctr=0.015)) == 60
        assert rank_risk(ContentMetrics(position=5, ctr=0.03)) == 40
        assert rank_risk(ContentMetrics(position=5, ctr=0.1)) == 10

    def test_unranked_uses_ctr_tier(self):
        assert rank_risk(ContentMetrics(position=0, ctr=0)) == 80

    def test_boundaries_are_exclusive(self):
        assert rank_risk(ContentMetrics(position=50)) == 70
        assert rank_risk(ContentMetrics(position=10, ctr=0.5)) == 10


class TestEngagementRisk(SimpleTestCase):

    def test_absent_signals_keep_base(self):
        assert engagement_risk(ContentMetrics()) == 50

    def test_all_signals_capped(self):
        metrics = ContentMetrics(bounce_rate=0.9, avg_time_on_page=10, sessions=2)
        assert engagement_risk(metrics) == 100

    def test_individual_signals(self):
        assert engagement_risk(ContentMetrics(bounce_rate=0.85)) == 80
        assert engagement_risk(ContentMetrics(avg_time_on_page=12)) == 70
        assert engagement_risk(ContentMetrics(sessions=3)) == 70

    def test_healthy_signals_add_nothing(self):
        metrics = ContentMetrics(bounce_rate=0.4, avg_time_on_page=120, sessions=300)
        assert engagement_risk(metrics) == 50

    def test_zero_values_count_as_absent(self):
        metrics = ContentMetrics(sessions=0, avg_time_on_page=0, bounce_rate=0)
        assert engagement_risk(metrics) == 50

    def test_zero_sessions_do_not_change_score(self):
        assert abs(score(ContentMetrics(sessions=0, avg_time_on_page=0)).score - 59.5) < 1e-9


class TestFreshnessRisk(SimpleTestCase):

    def test_tiers(self):
        assert freshness_risk(ContentMetrics(age_months=30)) == 80
        assert freshness_risk(ContentMetrics(age_months=24)) == 60
        assert freshness_risk(ContentMetrics(age_months=13)) == 60
        assert freshness_risk(ContentMetrics(age_months=7)) == 40
        assert freshness_risk(ContentMetrics(age_months=4)) == 20
        assert freshness_risk(ContentMetrics(age_months=2)) == 10


class TestNoValueRisk(SimpleTestCase):

    def test_nothing_of_value(self):
        assert no_value_risk(ContentMetrics()) == 100

    def test_every_signal_present(self):
        metrics = ContentMetrics(conversions=1, backlinks=1, clicks=1, impressions=100)
        assert no_value_risk(metrics) == 0

    def test_partial(self):
        metrics = ContentMetrics(conversions=0, backlinks=2, clicks=5, impressions=20)
        assert no_value_risk(metrics) == 50


class TestGuards(SimpleTestCase):

    def test_example_page_one_with_backlinks(self):
        metrics = ContentMetrics(clicks=150, impressions=2500, position=8, backlinks=3)
        guards = derive_guards(metrics)

        assert guards.has_page1_ranking is True
        assert guards.has_backlinks is True
        assert guards.has_recent_traffic is True
        assert guards.has_conversions is False
        assert guards.is_canonical is False

    def test_unranked_is_not_page_one(self):
        assert derive_guards(ContentMetrics(position=0)).has_page1_ranking is False

    def test_guards_multiply_in_order(self):
        guards = GuardFlags(has_backlinks=True, has_conversions=True, has_page1_ranking=True, has_recent_traffic=True)
        assert abs(apply_guards(100, guards) - 100 * 0.3 * 0.2 * 0.1 * 0.5) < 1e-9

    def test_guards_never_increase_score(self):
        samples = [
            ContentMetrics(),
            ContentMetrics(clicks=3, impressions=80, age_months=40),
            ContentMetrics(clicks=0, impressions=0, backlinks=5),
            ContentMetrics(clicks=50, impressions=2000, position=4, conversions=2),
        ]
        for metrics in samples:
            result = score(metrics)
            raw = weighted_score(result.breakdown, ScoreWeights())
            assert result.score <= raw + 1e-9


class TestZombieScore(SimpleTestCase):

    def test_unguarded_empty_page(self):
        # traffic 90, rank 80, engagement 50, freshness 10, cannibal 0, no value 100
        result = score(ContentMetrics())
        assert abs(result.score - 59.5) < 1e-9
        assert result.breakdown == {
            'traffic': 90,
            'rank': 80,
            'engagement': 50,
            'freshness': 10,
            'cannibal': 0,
            'no_value': 100,
        }

    def test_recent_traffic_halves_score(self):
        # 0.3*90 + 0.2*70 + 0.1*50 + 0.15*80 + 0.1*100 = 68, halved by recent traffic
        metrics = ContentMetrics(clicks=0, impressions=12, position=45, age_months=30)
        result = score(metrics)
        assert abs(result.score - 34.0) < 1e-9

    def test_cannibal_similarity_adds_risk(self):
        result = score(ContentMetrics(), cannibal_similarity=1.0)
        assert result.breakdown['cannibal'] == 100
        assert abs(result.score - 74.5) < 1e-9

    def test_clamped_to_100(self):
        heavy = ScoreWeights(traffic=1, rank=1, engagement=1, freshness=1, cannibal=1, no_value=1)
        assert score(ContentMetrics(), weights=heavy).score == 100

    def test_score_in_range(self):
        samples = [
            ContentMetrics(),
            ContentMetrics(clicks=10000, impressions=1000000, position=1, ctr=0.3, conversions=40, backlinks=100),
            ContentMetrics(clicks=2, impressions=30, position=70, age_months=60, bounce_rate=1, sessions=1),
        ]
        for metrics in samples:
            for similarity in (0, 0.5, 1):
                result = score(metrics, cannibal_similarity=similarity)
                assert 0 <= result.score <= 100

    def test_breakdown_reports_pre_guard_values(self):
        metrics = ContentMetrics(clicks=150, impressions=2500, position=8, backlinks=3)
        result = score(metrics)
        assert result.breakdown['traffic'] == 10
        assert result.score < weighted_score(result.breakdown, ScoreWeights())

    def test_deterministic(self):
        metrics = ContentMetrics(clicks=7, impressions=300, position=18, ctr=0.02, age_months=9)
        weights = ScoreWeights(traffic=0.5)
        assert score(metrics, weights, 0.4) == score(metrics, weights, 0.4)

    def test_is_canonical_passes_through(self):
        assert score(ContentMetrics(), is_canonical=True).guards.is_canonical is True

    def test_partial_weights_keep_defaults(self):
        weights = ScoreWeights.from_dict({'traffic': 0.5})
        assert weights.traffic == 0.5
        assert weights.rank == 0.2


class TestContentMetrics(SimpleTestCase):

    def test_negative_metric_rejected(self):
        with self.assertRaises(ValueError):
            ContentMetrics(clicks=-1)

    def test_from_dict_ignores_unknown_keys(self):
        metrics = ContentMetrics.from_dict({'clicks': 3, 'source': 'gsc'})
        assert metrics.clicks == 3
