"""
Human-readable outputs for a retirement run:
- Simulation report (markdown) for display and audit logs
- Cluster report listing canonical and redirected URLs
- Action plan CSV for the host plugin that applies changes

Nothing here is ever applied automatically. Every CSV row starts as
'pending' and must be approved outside this service.
"""
import csv
import io
from typing import Iterable, List, Tuple

from .constants import ACTION_KEEP
from .datatypes import ActionDecision, SimilarityCluster, SimulationReport


def format_simulation_report(report: SimulationReport) -> str:
    """Markdown report with Overview, Projected Impact, Action Breakdown and Risk Analysis."""
    breakdown = report.action_breakdown
    lines = [
        "# PrunePro Simulation Report",
        "",
        "## Overview",
        f"- **Total URLs Analyzed**: {report.total_urls}",
        f"- **Actions to Apply**: {report.actions_to_apply}",
        f"- **Risk Level**: {report.risk_level.upper()}",
        "",
        "## Projected Impact",
        f"- **Index Bloat Reduction**: {report.index_bloat_reduction}%",
        f"- **Crawl Budget Reclaimed**: {report.crawl_budget_reclaimed} estimated requests",
        f"- **Traffic Shift**: {report.traffic_shift} clicks",
        "",
        "## Action Breakdown",
        f"- Keep: {breakdown['keep']}",
        f"- Refresh: {breakdown['refresh']}",
        f"- Consolidate: {breakdown['consolidate']}",
        f"- Prune: {breakdown['prune']}",
        f"- Redirect: {breakdown['redirect']}",
        "",
        "## Risk Analysis",
        f"- **High Risk URLs**: {len(report.high_risk_urls)}",
        f"- **Potential Traffic Loss**: {report.potential_loss} clicks",
        f"- **Rollback Plan**: {report.rollback_plan or 'Nothing to roll back'}",
    ]

    if report.high_risk_urls:
        lines.append("")
        lines.append("## High Risk URLs")
        lines.extend(f"- {url}" for url in report.high_risk_urls)

    return '\n'.join(lines)


def format_cluster_report(clusters: List[SimilarityCluster]) -> str:
    if not clusters:
        return "No cannibalization detected."

    lines = [f"Found {len(clusters)} cannibalization clusters:", ""]

    for index, cluster in enumerate(clusters, start=1):
        redirects = [url for url in cluster.urls if url != cluster.canonical_url]
        lines.append(f"Cluster {index}:")
        lines.append(f"- Canonical: {cluster.canonical_url}")
        lines.append(f"- Redirects: {', '.join(redirects)}")
        lines.append(f"- URLs affected: {len(cluster.urls)}")
        lines.append("")

    return '\n'.join(lines).rstrip() + '\n'


def export_action_plan_csv(decisions: Iterable[Tuple[str, ActionDecision]]) -> str:
    """
    CSV of every non-keep decision.

    Columns: Source URL, Action, Target URL, Risk, Confidence, Rationale, Refresh Brief, Status
    """
    output = io.StringIO()
    writer = csv.writer(output)

    writer.writerow(['Source URL', 'Action', 'Target URL', 'Risk', 'Confidence', 'Rationale', 'Refresh Brief', 'Status'])

    for url, decision in decisions:
        if decision.action == ACTION_KEEP:
            continue
        writer.writerow([
            url,
            decision.action,
            getattr(decision, 'target_url', ''),
            decision.risk,
            decision.confidence,
            decision.rationale,
            getattr(decision, 'refresh_brief', ''),
            'pending',
        ])

    return output.getvalue()
