"""
API endpoints for the content retirement engine.

All endpoints are stateless: the batch in the request body is scored,
clustered, decided and simulated, and nothing is stored.
"""
import logging

from django.conf import settings
from django.http import HttpResponse
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .retirement import phase2_similarity, phase4_simulate
from .retirement.pipeline import run_analysis
from .retirement.reports import export_action_plan_csv, format_cluster_report, format_simulation_report
from .serializers import (
    AnalyzeRequestSerializer,
    ClusterRequestSerializer,
    SimulateRequestSerializer,
    build_document,
    build_items,
    build_planned_actions,
    build_weights,
)

logger = logging.getLogger(__name__)


def _error(code, message, http_status, details=None):
    body = {'error': {'code': code, 'message': message, 'status': http_status}}
    if details is not None:
        body['error']['details'] = details
    return Response(body, status=http_status)


def _check_batch_size(request, key):
    """Reject oversized batches before validating every row."""
    rows = request.data.get(key) if hasattr(request.data, 'get') else None
    limit = settings.PRUNEPRO_MAX_BATCH_SIZE
    if isinstance(rows, list) and len(rows) > limit:
        logger.warning(f"Rejected batch of {len(rows)} {key} (limit {limit})")
        return _error(
            'BATCH_TOO_LARGE',
            f"Batch has {len(rows)} {key}; the limit is {limit}. Split it into smaller chunks.",
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        )
    return None


def _validate(serializer_class, request):
    serializer = serializer_class(data=request.data)
    if not serializer.is_valid():
        return None, _error(
            'VALIDATION_ERROR',
            'Request body is invalid',
            status.HTTP_400_BAD_REQUEST,
            details=serializer.errors,
        )
    return serializer.validated_data, None


def _run_analysis(request):
    err = _check_batch_size(request, 'items')
    if err:
        return None, None, err

    data, err = _validate(AnalyzeRequestSerializer, request)
    if err:
        return None, None, err

    items = build_items(data['items'])
    weights = build_weights(data.get('weights'), defaults=settings.PRUNEPRO_SCORE_WEIGHTS)
    return run_analysis(items, weights=weights), data, None


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def retirement_analyze(request):
    """POST /api/v1/retirement/analyze/: Score, cluster, decide and simulate a batch."""
    result, data, err = _run_analysis(request)
    if err:
        return err

    payload = {
        'decisions': [item.to_dict() for item in result.items],
        'clusters': [cluster.to_dict() for cluster in result.clusters],
        'simulation': result.simulation.to_dict(),
    }
    if data['include_report']:
        payload['report'] = format_simulation_report(result.simulation)

    return Response({'data': payload})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def retirement_simulate(request):
    """POST /api/v1/retirement/simulate/: Simulate an already-decided batch."""
    err = _check_batch_size(request, 'actions')
    if err:
        return err

    data, err = _validate(SimulateRequestSerializer, request)
    if err:
        return err

    report = phase4_simulate.simulate(build_planned_actions(data['actions']))

    return Response({
        'data': {
            'simulation': report.to_dict(),
            'report': format_simulation_report(report),
        },
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def retirement_clusters(request):
    """POST /api/v1/retirement/clusters/: Near-duplicate clusters for a set of documents."""
    err = _check_batch_size(request, 'documents')
    if err:
        return err

    data, err = _validate(ClusterRequestSerializer, request)
    if err:
        return err

    clusters = phase2_similarity.detect_clusters([build_document(d) for d in data['documents']])

    return Response({
        'data': {
            'clusters': [cluster.to_dict() for cluster in clusters],
            'report': format_cluster_report(clusters),
        },
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def retirement_action_plan(request):
    """POST /api/v1/retirement/action-plan/: CSV of non-keep actions for the host plugin."""
    result, _, err = _run_analysis(request)
    if err:
        return err

    response = HttpResponse(export_action_plan_csv(result.decisions()), content_type='text/csv')
    response['Content-Disposition'] = 'attachment; filename="prunepro-action-plan.csv"'
    return response
