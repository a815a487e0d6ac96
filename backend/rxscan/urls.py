from django.urls import path
from .views import (
    AcknowledgeErrorView,
    CancelView,
    CommitView,
    DraftEditView,
    InventoryView,
    PrescriptionHistoryView,
    ScanCreateView,
    SessionView,
)

urlpatterns = [
    path('session/', SessionView.as_view(), name='session'),
    path('session/draft/', DraftEditView.as_view(), name='session-draft'),
    path('session/commit/', CommitView.as_view(), name='session-commit'),
    path('session/cancel/', CancelView.as_view(), name='session-cancel'),
    path('session/acknowledge/', AcknowledgeErrorView.as_view(), name='session-acknowledge'),
    path('scans/', ScanCreateView.as_view(), name='scan-create'),
    path('prescriptions/', PrescriptionHistoryView.as_view(), name='prescription-history'),
    path('inventory/', InventoryView.as_view(), name='inventory'),
]
