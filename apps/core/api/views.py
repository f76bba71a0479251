from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response


class BaseInventoryViewSet(viewsets.ModelViewSet):
    """
    Base ViewSet for archivable catalog entities.
    Lists only active rows unless ?include_inactive=true is passed, and
    DELETE archives the row through perform_destroy instead of removing it.
    """
    permission_classes = [IsAuthenticated]

    def include_inactive(self):
        return self.request.query_params.get('include_inactive', 'false').lower() == 'true'

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action == 'list' and not self.include_inactive():
            return queryset.filter(is_active=True)
        return queryset

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        self.perform_destroy(instance)
        return Response(status=status.HTTP_204_NO_CONTENT)

    def perform_destroy(self, instance):
        instance.soft_delete()

    def respond(self, serializer_class, instance, status_code=status.HTTP_200_OK, many=False):
        serializer = serializer_class(instance, many=many, context=self.get_serializer_context())
        return Response(serializer.data, status=status_code)
