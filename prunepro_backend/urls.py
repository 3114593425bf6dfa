"""
URL configuration for prunepro_backend project.

Unknown routes and unhandled errors answer with the same
{"error": {"code", "message", "status"}} envelope as the API views.
"""
from django.urls import path, include
from django.http import JsonResponse


def _error_response(code, message, status):
    return JsonResponse({'error': {'code': code, 'message': message, 'status': status}}, status=status)


def custom_404(request, exception=None):
    return _error_response('NOT_FOUND', f"No endpoint at {request.path}", 404)


def custom_500(request):
    return _error_response('INTERNAL_ERROR', 'An unexpected error occurred.', 500)


urlpatterns = [
    path('api/v1/', include('prunepro_backend.api_urls')),
]

handler404 = custom_404
handler500 = custom_500
