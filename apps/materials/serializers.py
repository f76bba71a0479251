from rest_framework import serializers

from apps.measurements.models import MeasurementUnit
from apps.partners.models import Supplier

from .models import Lot, RawMaterial


class RawMaterialSerializer(serializers.ModelSerializer):
    unit_abbreviation = serializers.ReadOnlyField(source='unit.abbreviation')
    is_low_stock = serializers.ReadOnlyField()

    class Meta:
        model = RawMaterial
        fields = [
            'id', 'name', 'description', 'unit', 'unit_abbreviation',
            'current_stock', 'minimum_stock', 'unit_cost', 'is_low_stock',
            'is_active'
        ]
        read_only_fields = ['current_stock', 'is_active']

    def validate(self, attrs):
        # unit_cost is an initial value only; afterwards entries drive it
        if self.instance is not None:
            cost = attrs.pop('unit_cost', None)
            if cost is not None and cost != self.instance.unit_cost:
                raise serializers.ValidationError(
                    {'unit_cost': 'El costo unitario solo cambia mediante entradas de inventario.'}
                )
        return attrs


class LotSerializer(serializers.ModelSerializer):
    material_name = serializers.ReadOnlyField(source='material.name')
    days_to_expiration = serializers.SerializerMethodField()

    class Meta:
        model = Lot
        fields = [
            'id', 'material', 'material_name', 'code', 'initial_quantity',
            'current_quantity', 'production_date', 'expiration_date',
            'days_to_expiration', 'unit_cost', 'is_active', 'created_at'
        ]
        read_only_fields = ['material', 'initial_quantity', 'current_quantity', 'is_active', 'created_at']

    def get_days_to_expiration(self, obj):
        return obj.days_to_expiration()


class LotOpenSerializer(serializers.Serializer):
    """Payload of POST /lots/: the lot is opened by its initial entry"""
    material = serializers.PrimaryKeyRelatedField(queryset=RawMaterial.objects.all())
    code = serializers.CharField(max_length=50)
    quantity = serializers.DecimalField(max_digits=18, decimal_places=4)
    unit = serializers.PrimaryKeyRelatedField(queryset=MeasurementUnit.objects.all(), required=False, allow_null=True)
    unit_cost = serializers.DecimalField(max_digits=18, decimal_places=6, required=False, allow_null=True)
    production_date = serializers.DateField(required=False, allow_null=True)
    expiration_date = serializers.DateField(required=False, allow_null=True)
    supplier = serializers.PrimaryKeyRelatedField(queryset=Supplier.objects.all(), required=False, allow_null=True)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
