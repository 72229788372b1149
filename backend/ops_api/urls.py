"""
URL configuration for ops_api project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/4.2/topics/http/urls/
"""

from django.http import JsonResponse
from django.urls import include, path


def api_root(request):
    """API root endpoint with available endpoints."""
    return JsonResponse({
        'message': 'Operations HOS Compliance API',
        'version': '1.0',
        'endpoints': {
            'hos_compliance': '/api/hos/',
            'health': '/api/health/',
        },
        'documentation': {
            'hos_compliance': {
                'description': 'Hours of Service evaluation, prediction and fleet dashboard',
                'endpoints': {
                    'segments': 'POST /api/hos/segments/build/ - Build duty segments from timecards',
                    'evaluate': 'POST /api/hos/evaluate/ - Evaluate a driver',
                    'predict': 'POST /api/hos/predict/ - Predict violations for a planned schedule',
                    'schedule': 'POST /api/hos/schedule/analyze/ - Analyze planned shifts',
                    'fleet': 'POST /api/hos/fleet/dashboard/ - Fleet dashboard counts',
                    'grid': 'POST /api/hos/grid/ - Rolling 60/7 grid',
                    'policy': 'GET /api/hos/policy/ - Active policy',
                }
            }
        }
    })


def health(request):
    """Liveness endpoint."""
    return JsonResponse({'status': 'ok'})


urlpatterns = [
    # API root
    path("api/", api_root, name='api-root'),
    path("api/health/", health, name='api-health'),

    # HOS Compliance API
    path("api/hos/", include("hos_compliance.urls")),
]
