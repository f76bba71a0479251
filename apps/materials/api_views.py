from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.api.views import BaseInventoryViewSet
from apps.inventory.serializers import StockMovementSerializer
from apps.inventory.services import EntryCommand, LedgerService, LotSpec
from apps.reports.services import ConsumptionService

from .models import Lot, RawMaterial
from .serializers import LotOpenSerializer, LotSerializer, RawMaterialSerializer
from .services import CatalogService, LotService


class RawMaterialViewSet(BaseInventoryViewSet):
    """
    API endpoint for the raw material catalog.
    Stock and cost are read-only here: they only move through the ledger.
    """
    queryset = RawMaterial.objects.all().select_related('unit')
    serializer_class = RawMaterialSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        search = self.request.query_params.get('search')
        if search:
            queryset = queryset.filter(name__icontains=search)
        return queryset

    def perform_create(self, serializer):
        serializer.instance = CatalogService.create_item(**serializer.validated_data)

    def perform_update(self, serializer):
        serializer.instance = CatalogService.update_item(serializer.instance, **serializer.validated_data)

    def perform_destroy(self, instance):
        CatalogService.delete_item(instance)

    @action(detail=False, methods=['get'], url_path='low-stock')
    def low_stock(self, request):
        return self.respond(RawMaterialSerializer, CatalogService.low_stock_items(), many=True)

    @action(detail=False, methods=['get'])
    def restock(self, request):
        """GET /api/v1/materials/restock/?dias_proyeccion=30&umbral_dias=7"""
        return Response(ConsumptionService.restock_report(
            horizon_days=request.query_params.get('dias_proyeccion', 30),
            threshold_days=request.query_params.get('umbral_dias', 7),
        ))

    @action(detail=True, methods=['get'])
    def movements(self, request, pk=None):
        material = self.get_object()
        queryset = LedgerService.query_movements(material=material)
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(StockMovementSerializer(page, many=True).data)
        return Response(StockMovementSerializer(queryset, many=True).data)

    @action(detail=True, methods=['get'])
    def consumption(self, request, pk=None):
        material = self.get_object()
        return Response(ConsumptionService.statistics(material, days=request.query_params.get('days', 30)))

    @action(detail=True, methods=['get'])
    def projection(self, request, pk=None):
        material = self.get_object()
        return Response(ConsumptionService.projection(material, days=request.query_params.get('days', 30)))


class LotViewSet(BaseInventoryViewSet):
    """
    Lots. Creating a lot records its opening entry in the ledger.
    GET /api/v1/lots/?material=3&available=true
    GET /api/v1/lots/expiring/?days=7
    """
    queryset = Lot.objects.all().select_related('material')
    serializer_class = LotSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        material_id = self.request.query_params.get('material')
        if material_id:
            queryset = queryset.filter(material_id=material_id)
        if self.request.query_params.get('available', 'false').lower() == 'true':
            queryset = queryset.filter(current_quantity__gt=0)
        return queryset

    def create(self, request, *args, **kwargs):
        payload = LotOpenSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data
        movement = LedgerService.record_entry(EntryCommand(
            material=data['material'],
            quantity=data['quantity'],
            unit=data.get('unit'),
            unit_cost=data.get('unit_cost'),
            new_lot=LotSpec(
                code=data['code'],
                expiration_date=data.get('expiration_date'),
                production_date=data.get('production_date'),
            ),
            supplier=data.get('supplier'),
            description=data.get('description') or 'Entrada inicial de lote',
            actor=request.user,
        ))
        return self.respond(LotSerializer, movement.lot, status_code=status.HTTP_201_CREATED)

    def perform_update(self, serializer):
        serializer.instance = LotService.update_lot(serializer.instance, **serializer.validated_data)

    def perform_destroy(self, instance):
        LotService.archive_lot(instance)

    @action(detail=False, methods=['get'])
    def expiring(self, request):
        days = request.query_params.get('days', 7)
        try:
            days = int(days)
        except ValueError:
            days = 7
        lots = LotService.expiring_within(days)
        return self.respond(LotSerializer, lots, many=True)
