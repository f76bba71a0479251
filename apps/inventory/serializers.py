from rest_framework import serializers

from apps.materials.models import Lot, RawMaterial
from apps.measurements.models import MeasurementUnit
from apps.partners.models import Supplier

from .models import AdjustmentType, MovementType, StockMovement


class AdjustmentTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = AdjustmentType
        fields = ['id', 'name', 'description', 'affects_cost', 'requires_authorization', 'is_active']
        read_only_fields = ['is_active']


class StockMovementSerializer(serializers.ModelSerializer):
    movement_type_display = serializers.CharField(source='get_movement_type_display', read_only=True)
    material_name = serializers.ReadOnlyField(source='material.name')
    unit = serializers.ReadOnlyField(source='material.unit.abbreviation')
    lot_code = serializers.CharField(source='lot.code', read_only=True, default=None)
    entered_unit_abbreviation = serializers.CharField(source='entered_unit.abbreviation', read_only=True, default=None)
    supplier_name = serializers.CharField(source='supplier.name', read_only=True, default=None)
    adjustment_type_name = serializers.CharField(source='adjustment_type.name', read_only=True, default=None)
    username = serializers.CharField(source='user.username', read_only=True, default=None)

    class Meta:
        model = StockMovement
        fields = [
            'id', 'movement_type', 'movement_type_display', 'material', 'material_name',
            'lot', 'lot_code', 'quantity', 'unit', 'entered_quantity', 'entered_unit',
            'entered_unit_abbreviation', 'unit_cost', 'balance_after', 'cost_impact',
            'supplier', 'supplier_name', 'adjustment_type', 'adjustment_type_name',
            'description', 'user', 'username', 'created_at'
        ]
        read_only_fields = fields


class LotSpecSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    expiration_date = serializers.DateField(required=False, allow_null=True)
    production_date = serializers.DateField(required=False, allow_null=True)
    unit_cost = serializers.DecimalField(max_digits=18, decimal_places=6, required=False, allow_null=True)


class MovementRequestSerializer(serializers.Serializer):
    material = serializers.PrimaryKeyRelatedField(queryset=RawMaterial.objects.all())
    quantity = serializers.DecimalField(max_digits=18, decimal_places=4)
    unit = serializers.PrimaryKeyRelatedField(queryset=MeasurementUnit.objects.all(), required=False, allow_null=True)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')


class EntryRequestSerializer(MovementRequestSerializer):
    unit_cost = serializers.DecimalField(max_digits=18, decimal_places=6, required=False, allow_null=True)
    lot = serializers.PrimaryKeyRelatedField(queryset=Lot.objects.all(), required=False, allow_null=True)
    new_lot = LotSpecSerializer(required=False, allow_null=True)
    supplier = serializers.PrimaryKeyRelatedField(queryset=Supplier.objects.all(), required=False, allow_null=True)

    def validate(self, attrs):
        if attrs.get('lot') and attrs.get('new_lot'):
            raise serializers.ValidationError('Indique un lote existente o uno nuevo, no ambos.')
        return attrs


class ExitRequestSerializer(MovementRequestSerializer):
    adjustment_type = serializers.PrimaryKeyRelatedField(
        queryset=AdjustmentType.objects.all(), required=False, allow_null=True
    )
    lot = serializers.PrimaryKeyRelatedField(queryset=Lot.objects.all(), required=False, allow_null=True)


class FifoExitRequestSerializer(MovementRequestSerializer):
    adjustment_type = serializers.PrimaryKeyRelatedField(
        queryset=AdjustmentType.objects.all(), required=False, allow_null=True
    )


class MovementFilterSerializer(serializers.Serializer):
    """Query string of GET /movements/"""
    material = serializers.PrimaryKeyRelatedField(queryset=RawMaterial.objects.all(), required=False)
    lot = serializers.PrimaryKeyRelatedField(queryset=Lot.objects.all(), required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    type = serializers.ChoiceField(choices=MovementType.choices, required=False)
