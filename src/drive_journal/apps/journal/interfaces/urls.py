"""URL configuration for the journal app."""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views

# Create a router for journal endpoints
router = DefaultRouter()
router.register(r'journal', views.JournalViewSet, basename='journal')
router.register(r'drives', views.DriveViewSet, basename='drive')
router.register(r'grouped-drives', views.GroupedDriveViewSet, basename='grouped-drive')

urlpatterns = [
    path('', include(router.urls)),
]
