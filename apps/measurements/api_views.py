from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.core.api.views import BaseInventoryViewSet
from apps.core.utils import format_quantity

from .models import MeasurementUnit, UnitConversion
from .serializers import (
    ConversionCreateSerializer,
    ConversionFactorSerializer,
    ConvertRequestSerializer,
    MeasurementUnitSerializer,
    UnitConversionSerializer,
)
from .services import ConversionService, UnitService


class MeasurementUnitViewSet(BaseInventoryViewSet):
    """
    API endpoint for measurement units.
    GET /api/v1/units/?category=mass
    """
    queryset = MeasurementUnit.objects.all()
    serializer_class = MeasurementUnitSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        category = self.request.query_params.get('category')
        if category:
            queryset = queryset.filter(category=category)
        return queryset

    def perform_create(self, serializer):
        serializer.instance = UnitService.create_unit(**serializer.validated_data)

    def perform_update(self, serializer):
        serializer.instance = UnitService.update_unit(serializer.instance, **serializer.validated_data)

    def perform_destroy(self, instance):
        UnitService.deactivate_unit(instance)


class UnitConversionViewSet(mixins.ListModelMixin,
                            mixins.RetrieveModelMixin,
                            viewsets.GenericViewSet):
    """
    Conversion table. Every write touches the edge and its reciprocal.
    POST   /api/v1/conversions/           define a pair
    PATCH  /api/v1/conversions/{id}/      change the factor of a pair
    DELETE /api/v1/conversions/{id}/      remove a pair
    POST   /api/v1/conversions/convert/   convert a quantity through a direct edge
    """
    queryset = UnitConversion.objects.select_related('origin', 'destination')
    serializer_class = UnitConversionSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        unit_id = self.request.query_params.get('unit')
        if unit_id:
            unit = MeasurementUnit.objects.filter(pk=unit_id).first()
            return ConversionService.conversions_for(unit) if unit else UnitConversion.objects.none()
        return super().get_queryset()

    def create(self, request, *args, **kwargs):
        payload = ConversionCreateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        edge = ConversionService.define_conversion(**payload.validated_data)
        return Response(UnitConversionSerializer(edge).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):
        edge = self.get_object()
        payload = ConversionFactorSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        edge = ConversionService.update_factor(edge.origin, edge.destination, payload.validated_data['factor'])
        return Response(UnitConversionSerializer(edge).data)

    def destroy(self, request, *args, **kwargs):
        edge = self.get_object()
        ConversionService.remove_conversion(edge.origin, edge.destination)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=['post'])
    def convert(self, request):
        payload = ConvertRequestSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data
        result = ConversionService.convert(data['quantity'], data['origin'], data['destination'])
        return Response({
            'quantity': str(data['quantity']),
            'origin': data['origin'].abbreviation,
            'destination': data['destination'].abbreviation,
            'result': format_quantity(result),
        })
