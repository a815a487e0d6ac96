from django.urls import include, path

urlpatterns = [
    path('api/', include('rxscan.urls')),
]
