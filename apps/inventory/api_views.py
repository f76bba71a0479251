from django.http import HttpResponse
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.core.api.renderers import CSVRenderer, XLSXRenderer
from apps.core.api.views import BaseInventoryViewSet
from apps.reports.exports import MovementExporter

from .models import AdjustmentType, StockMovement
from .serializers import (
    AdjustmentTypeSerializer,
    EntryRequestSerializer,
    ExitRequestSerializer,
    FifoExitRequestSerializer,
    MovementFilterSerializer,
    StockMovementSerializer,
)
from .services import AdjustmentTypeService, EntryCommand, ExitCommand, LedgerService, LotSpec


class AdjustmentTypeViewSet(BaseInventoryViewSet):
    """
    API endpoint for adjustment types.
    GET /api/v1/adjustment-types/?requires_authorization=true&affects_cost=false
    """
    queryset = AdjustmentType.objects.all()
    serializer_class = AdjustmentTypeSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        for flag in ('requires_authorization', 'affects_cost'):
            value = self.request.query_params.get(flag)
            if value is not None:
                queryset = queryset.filter(**{flag: value.lower() == 'true'})
        return queryset

    def perform_create(self, serializer):
        serializer.instance = AdjustmentTypeService.create_type(**serializer.validated_data)

    def perform_update(self, serializer):
        serializer.instance = AdjustmentTypeService.update_type(serializer.instance, **serializer.validated_data)

    def perform_destroy(self, instance):
        AdjustmentTypeService.delete_type(instance)


class StockMovementViewSet(mixins.ListModelMixin,
                           mixins.RetrieveModelMixin,
                           viewsets.GenericViewSet):
    """
    The movement ledger. Read-only except for the three recording actions.
    GET  /api/v1/movements/?material=&lot=&date_from=&date_to=&type=
    POST /api/v1/movements/entry/
    POST /api/v1/movements/exit/
    POST /api/v1/movements/fifo-exit/
    GET  /api/v1/movements/export/?format=csv|xlsx
    """
    queryset = StockMovement.objects.all()
    serializer_class = StockMovementSerializer
    permission_classes = [IsAuthenticated]

    def filtered_movements(self):
        params = MovementFilterSerializer(data=self.request.query_params)
        params.is_valid(raise_exception=True)
        data = params.validated_data
        return LedgerService.query_movements(
            material=data.get('material'),
            lot=data.get('lot'),
            date_from=data.get('date_from'),
            date_to=data.get('date_to'),
            movement_type=data.get('type'),
        )

    def get_queryset(self):
        if self.action in ('list', 'export'):
            return self.filtered_movements()
        return LedgerService.query_movements()

    @action(detail=False, methods=['post'])
    def entry(self, request):
        payload = EntryRequestSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data
        new_lot = LotSpec(**data['new_lot']) if data.get('new_lot') else None
        movement = LedgerService.record_entry(EntryCommand(
            material=data['material'],
            quantity=data['quantity'],
            unit=data.get('unit'),
            unit_cost=data.get('unit_cost'),
            lot=data.get('lot'),
            new_lot=new_lot,
            supplier=data.get('supplier'),
            description=data.get('description', ''),
            actor=request.user,
        ))
        return Response(StockMovementSerializer(movement).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['post'])
    def exit(self, request):
        payload = ExitRequestSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data
        movement = LedgerService.record_exit(ExitCommand(
            material=data['material'],
            quantity=data['quantity'],
            adjustment_type=data.get('adjustment_type'),
            unit=data.get('unit'),
            lot=data.get('lot'),
            description=data.get('description', ''),
            actor=request.user,
        ))
        return Response(StockMovementSerializer(movement).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['post'], url_path='fifo-exit')
    def fifo_exit(self, request):
        payload = FifoExitRequestSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data
        movements = LedgerService.consume_fifo(
            data['material'],
            data['quantity'],
            adjustment_type=data.get('adjustment_type'),
            actor=request.user,
            description=data.get('description', ''),
            unit=data.get('unit'),
        )
        return Response(StockMovementSerializer(movements, many=True).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['get'], renderer_classes=[CSVRenderer, XLSXRenderer])
    def export(self, request):
        fmt = request.accepted_renderer.format
        content, content_type = MovementExporter(self.get_queryset()).export(fmt)
        response = HttpResponse(content, content_type=content_type)
        response['Content-Disposition'] = f'attachment; filename="{MovementExporter.filename(fmt)}"'
        return response
