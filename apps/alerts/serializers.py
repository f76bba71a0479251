from django.contrib.auth import get_user_model
from rest_framework import serializers

from apps.materials.models import Lot, RawMaterial

from .models import AlertType, InventoryAlert


class InventoryAlertSerializer(serializers.ModelSerializer):
    alert_type_display = serializers.CharField(source='get_alert_type_display', read_only=True)
    material_name = serializers.CharField(source='material.name', read_only=True, default=None)
    lot_code = serializers.CharField(source='lot.code', read_only=True, default=None)

    class Meta:
        model = InventoryAlert
        fields = [
            'id', 'alert_type', 'alert_type_display', 'message', 'subject_key',
            'material', 'material_name', 'lot', 'lot_code', 'recipient',
            'read', 'read_at', 'resolved_at', 'created_at'
        ]
        read_only_fields = fields


class ManualAlertSerializer(serializers.Serializer):
    alert_type = serializers.ChoiceField(choices=AlertType.choices)
    message = serializers.CharField()
    material = serializers.PrimaryKeyRelatedField(queryset=RawMaterial.objects.all(), required=False, allow_null=True)
    lot = serializers.PrimaryKeyRelatedField(queryset=Lot.objects.all(), required=False, allow_null=True)
    recipient = serializers.PrimaryKeyRelatedField(
        queryset=get_user_model().objects.all(), required=False, allow_null=True
    )


class MarkAllReadSerializer(serializers.Serializer):
    alert_type = serializers.ChoiceField(choices=AlertType.choices, required=False)
