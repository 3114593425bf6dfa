"""
API URL routing for prunepro_backend.
All API endpoints are prefixed with /api/v1/
"""
import importlib

from django.urls import path
from django.http import JsonResponse


def health_check(request):
    """Liveness probe; no auth and no engine work."""
    from seo.retirement import __version__
    return JsonResponse({"status": "healthy", "service": "prunepro", "version": __version__})


def _lazy(module, attr):
    """Resolve the view on first request so DRF settings load after Django setup."""
    def view(*args, **kwargs):
        return getattr(importlib.import_module(module), attr)(*args, **kwargs)
    return view


def _retirement(attr):
    return _lazy('seo.retirement_views', attr)


urlpatterns = [
    path('health/', health_check, name='health'),
    path('retirement/analyze/', _retirement('retirement_analyze'), name='retirement-analyze'),
    path('retirement/simulate/', _retirement('retirement_simulate'), name='retirement-simulate'),
    path('retirement/clusters/', _retirement('retirement_clusters'), name='retirement-clusters'),
    path('retirement/action-plan/', _retirement('retirement_action_plan'), name='retirement-action-plan'),
]
