"""
URL routing for the events API.
"""

from django.urls import path
from .views import (
    EventListCreateView,
    EventDetailView,
    EventToggleActiveView,
    EventSeriesView,
    RecurrencePreviewView,
    EventCategoryListCreateView,
    EventCategoryReorderView,
)

urlpatterns = [
    path('events/', EventListCreateView.as_view(), name='event-list-create'),
    path('events/preview/', RecurrencePreviewView.as_view(), name='event-recurrence-preview'),
    path('events/<int:pk>/', EventDetailView.as_view(), name='event-detail'),
    path('events/<int:pk>/toggle/', EventToggleActiveView.as_view(), name='event-toggle'),
    path('events/<int:pk>/series/', EventSeriesView.as_view(), name='event-series'),
    path('event-categories/', EventCategoryListCreateView.as_view(), name='event-category-list-create'),
    path('event-categories/reorder/', EventCategoryReorderView.as_view(), name='event-category-reorder'),
]
