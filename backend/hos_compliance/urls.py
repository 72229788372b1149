"""
URL configuration for HOS Compliance API endpoints.

Provides URL routing for segment building, driver evaluation, schedule
prediction, fleet dashboard and grid endpoints.
"""

from django.urls import path

from .views import FleetViewSet, HOSEvaluationViewSet, PolicyViewSet, SegmentViewSet

urlpatterns = [
    # Segment endpoints
    path('segments/build/',
         SegmentViewSet.as_view({'post': 'build'}),
         name='hos-segments-build'),

    # Driver evaluation endpoints
    path('evaluate/',
         HOSEvaluationViewSet.as_view({'post': 'evaluate'}),
         name='hos-evaluate'),
    path('predict/',
         HOSEvaluationViewSet.as_view({'post': 'predict'}),
         name='hos-predict'),
    path('schedule/analyze/',
         HOSEvaluationViewSet.as_view({'post': 'analyze_schedule'}),
         name='hos-schedule-analyze'),

    # Fleet endpoints
    path('fleet/dashboard/',
         FleetViewSet.as_view({'post': 'dashboard'}),
         name='hos-fleet-dashboard'),
    path('grid/',
         FleetViewSet.as_view({'post': 'grid'}),
         name='hos-grid'),

    # Policy
    path('policy/',
         PolicyViewSet.as_view({'get': 'list'}),
         name='hos-policy'),
]

# API Documentation - Available Endpoints:
"""
GET Endpoints:
- /api/hos/policy/ - Active HOS policy limits

POST Endpoints:
- /api/hos/segments/build/ - Build duty segments from attendance records
- /api/hos/evaluate/ - Evaluate a driver: metrics, violations, badge, recommendations
- /api/hos/predict/ - Predict the first violation of a planned schedule
- /api/hos/schedule/analyze/ - Predictions for every planned driver plus alternatives
- /api/hos/fleet/dashboard/ - Fleet counts (available, limited, rest required, violation)
- /api/hos/grid/ - Rolling 60/7 grid rows
"""
