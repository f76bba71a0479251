from apps.core.api.views import BaseInventoryViewSet

from .models import Supplier
from .serializers import SupplierSerializer


class SupplierViewSet(BaseInventoryViewSet):
    """
    API endpoint for the supplier directory.
    DELETE archives the supplier; its past entries keep referencing it.
    """
    queryset = Supplier.objects.all()
    serializer_class = SupplierSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        search = self.request.query_params.get('search')
        if search:
            queryset = queryset.filter(name__icontains=search)
        return queryset
