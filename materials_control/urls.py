"""
Materials Control URL Configuration
"""
from django.conf import settings
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path(settings.ADMIN_URL, admin.site.urls),

    # Inventory API
    path('api/v1/', include('materials_control.api_urls')),
]
