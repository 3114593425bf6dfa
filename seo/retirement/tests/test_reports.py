"""
Test Group F: Reports and action plan export
"""
import csv
import io

from django.test import SimpleTestCase

from seo.retirement.datatypes import (
    ContentMetrics,
    KeepDecision,
    PlannedAction,
    RedirectDecision,
    RefreshDecision,
    SimilarityCluster,
)
from seo.retirement.phase4_simulate import simulate
from seo.retirement.reports import export_action_plan_csv, format_cluster_report, format_simulation_report


class TestSimulationReport(SimpleTestCase):

    def test_sections(self):
        actions = [
            PlannedAction(url=f"https://example.com/{action}", action=action, risk=10, metrics=ContentMetrics())
            for action in ('keep', 'refresh', 'consolidate', 'prune', 'redirect')
        ]
        text = format_simulation_report(simulate(actions))

        assert text.startswith('# PrunePro Simulation Report')
        for heading in ('## Overview', '## Projected Impact', '## Action Breakdown', '## Risk Analysis'):
            assert heading in text
        assert '- **Index Bloat Reduction**: 60%' in text
        assert '- **Risk Level**: LOW' in text
        assert '## High Risk URLs' not in text

    def test_lists_high_risk_urls(self):
        actions = [PlannedAction(url='https://example.com/x', action='prune', risk=80, metrics=ContentMetrics())]
        text = format_simulation_report(simulate(actions))

        assert '## High Risk URLs' in text
        assert '- https://example.com/x' in text

    def test_empty_rollback(self):
        text = format_simulation_report(simulate([]))
        assert '- **Rollback Plan**: Nothing to roll back' in text


class TestClusterReport(SimpleTestCase):

    def test_no_clusters(self):
        assert format_cluster_report([]) == 'No cannibalization detected.'

    def test_canonical_and_redirects(self):
        cluster = SimilarityCluster(
            id='cluster_0',
            urls=['https://example.com/blog/shoes', 'https://example.com/shoes', 'https://example.com/a/b/shoes'],
            canonical_url='https://example.com/shoes',
        )
        text = format_cluster_report([cluster])

        assert text.startswith('Found 1 cannibalization clusters:')
        assert '- Canonical: https://example.com/shoes' in text
        assert '- Redirects: https://example.com/blog/shoes, https://example.com/a/b/shoes' in text
        assert '- URLs affected: 3' in text


class TestActionPlanCsv(SimpleTestCase):

    def test_skips_keep_rows(self):
        decisions = [
            ('https://example.com/a', KeepDecision(rationale='fine', risk=10, confidence=60)),
            ('https://example.com/b', RedirectDecision(
                rationale='thin', risk=25, confidence=70, target_url='https://example.com/',
            )),
            ('https://example.com/c', RefreshDecision(
                rationale='aging', risk=20, confidence=75, refresh_brief='Refresh c content addressing: x.',
            )),
        ]
        rows = list(csv.reader(io.StringIO(export_action_plan_csv(decisions))))

        assert rows[0] == ['Source URL', 'Action', 'Target URL', 'Risk', 'Confidence', 'Rationale', 'Refresh Brief', 'Status']
        assert len(rows) == 3
        assert rows[1] == ['https://example.com/b', 'redirect', 'https://example.com/', '25', '70', 'thin', '', 'pending']
        assert rows[2][2] == ''

    def test_refresh_brief_has_its_own_column(self):
        decision = RefreshDecision(rationale='aging', risk=20, confidence=75, refresh_brief='Refresh c content.')
        rows = list(csv.reader(io.StringIO(export_action_plan_csv([('https://example.com/c', decision)]))))

        assert rows[1][5] == 'aging'
        assert rows[1][6] == 'Refresh c content.'
