from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import (
    TokenObtainPairView,
    TokenRefreshView,
)

from apps.alerts.api_views import InventoryAlertViewSet
from apps.inventory.api_views import AdjustmentTypeViewSet, StockMovementViewSet
from apps.materials.api_views import LotViewSet, RawMaterialViewSet
from apps.measurements.api_views import MeasurementUnitViewSet, UnitConversionViewSet
from apps.partners.api_views import SupplierViewSet

router = DefaultRouter()
router.register(r'units', MeasurementUnitViewSet, basename='api-unit')
router.register(r'conversions', UnitConversionViewSet, basename='api-conversion')
router.register(r'materials', RawMaterialViewSet, basename='api-material')
router.register(r'lots', LotViewSet, basename='api-lot')
router.register(r'adjustment-types', AdjustmentTypeViewSet, basename='api-adjustment-type')
router.register(r'suppliers', SupplierViewSet, basename='api-supplier')
router.register(r'movements', StockMovementViewSet, basename='api-movement')
router.register(r'alerts', InventoryAlertViewSet, basename='api-alert')

urlpatterns = [
    # Auth
    path('auth/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),

    # Generic Router
    path('', include(router.urls)),
]
