from django.urls import path, include

urlpatterns = [
    path('api/', include('drive_journal.apps.journal.interfaces.urls')),
]
