from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .models import InventoryAlert
from .serializers import InventoryAlertSerializer, ManualAlertSerializer, MarkAllReadSerializer
from .services import AlertEngine


class InventoryAlertViewSet(mixins.ListModelMixin,
                            mixins.RetrieveModelMixin,
                            viewsets.GenericViewSet):
    """
    Inventory alerts.
    GET  /api/v1/alerts/?type=stock_bajo&read=false
    POST /api/v1/alerts/               manual alert
    POST /api/v1/alerts/{id}/read/
    POST /api/v1/alerts/read-all/      optional {"alert_type": ...}
    GET  /api/v1/alerts/summary/
    """
    queryset = InventoryAlert.objects.select_related('material', 'lot')
    serializer_class = InventoryAlertSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        queryset = super().get_queryset()
        alert_type = self.request.query_params.get('type')
        if alert_type:
            queryset = queryset.filter(alert_type=alert_type)
        read = self.request.query_params.get('read')
        if read is not None:
            queryset = queryset.filter(read=read.lower() == 'true')
        return queryset

    def create(self, request, *args, **kwargs):
        payload = ManualAlertSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        alert = AlertEngine.create_manual(**payload.validated_data)
        return Response(InventoryAlertSerializer(alert).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def read(self, request, pk=None):
        alert = AlertEngine.mark_read(self.get_object())
        return Response(InventoryAlertSerializer(alert).data)

    @action(detail=False, methods=['post'], url_path='read-all')
    def read_all(self, request):
        payload = MarkAllReadSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        updated = AlertEngine.mark_all_read(payload.validated_data.get('alert_type'))
        return Response({'updated': updated})

    @action(detail=False, methods=['get'])
    def summary(self, request):
        return Response(AlertEngine.summary())
