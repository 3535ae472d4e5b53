"""Root URL configuration for Multi AD Login."""
from django.urls import include, path

urlpatterns = [
    path('accounts/', include('accounts.urls')),
]
