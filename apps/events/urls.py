from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'events'

# Router for ViewSets
router = DefaultRouter()
router.register(r'', views.EventViewSet, basename='event')

urlpatterns = [
    # GET  /api/events/              - List user's events
    # POST /api/events/              - Create event
    # GET  /api/events/{id}/         - Get event details
    # POST /api/events/{id}/close/   - Close the racha (organizer)
    path('', include(router.urls)),
]
