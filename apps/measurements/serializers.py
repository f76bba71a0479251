from rest_framework import serializers

from .models import MeasurementUnit, UnitConversion


class MeasurementUnitSerializer(serializers.ModelSerializer):
    category_display = serializers.CharField(source='get_category_display', read_only=True)

    class Meta:
        model = MeasurementUnit
        fields = ['id', 'name', 'abbreviation', 'category', 'category_display', 'is_active']
        read_only_fields = ['is_active']


class UnitConversionSerializer(serializers.ModelSerializer):
    origin_abbreviation = serializers.ReadOnlyField(source='origin.abbreviation')
    destination_abbreviation = serializers.ReadOnlyField(source='destination.abbreviation')

    class Meta:
        model = UnitConversion
        fields = [
            'id', 'origin', 'origin_abbreviation',
            'destination', 'destination_abbreviation', 'factor'
        ]


class ConversionCreateSerializer(serializers.Serializer):
    origin = serializers.PrimaryKeyRelatedField(queryset=MeasurementUnit.objects.all())
    destination = serializers.PrimaryKeyRelatedField(queryset=MeasurementUnit.objects.all())
    factor = serializers.DecimalField(max_digits=24, decimal_places=12)


class ConversionFactorSerializer(serializers.Serializer):
    factor = serializers.DecimalField(max_digits=24, decimal_places=12)


class ConvertRequestSerializer(serializers.Serializer):
    quantity = serializers.DecimalField(max_digits=20, decimal_places=6)
    origin = serializers.PrimaryKeyRelatedField(queryset=MeasurementUnit.objects.all())
    destination = serializers.PrimaryKeyRelatedField(queryset=MeasurementUnit.objects.all())


