"""URL configuration for the Hosteud project.

The `urlpatterns` list routes URLs to views. It includes the Django admin,
JWT token endpoints, the OpenAPI schema and the routers of each app.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore
from drf_spectacular.views import SpectacularAPIView  # type: ignore
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView  # type: ignore

# API versioning. v1 is our initial version; future versions can be added here.

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/v1/auth/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('api/v1/auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    # Application URLs
    path('api/v1/properties/', include('apps.properties.urls')),
    path('api/v1/commissions/', include('apps.commissions.urls')),
    path('api/v1/promotions/', include('apps.promotions.urls')),
    path('api/v1/pricing/', include('apps.pricing.urls')),
    path('api/v1/bookings/', include('apps.bookings.urls')),
]
