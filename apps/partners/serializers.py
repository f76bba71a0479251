from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from .models import Supplier, normalize_rfc, validate_rfc


class SupplierSerializer(serializers.ModelSerializer):
    # length and format are checked on the normalized RFC
    tax_id = serializers.CharField(required=False, allow_blank=True, max_length=20)

    class Meta:
        model = Supplier
        fields = [
            'id', 'name', 'tax_id', 'email', 'phone', 'address',
            'products_services', 'payment_terms', 'lead_time_days',
            'notes', 'is_active'
        ]
        read_only_fields = ['is_active']

    def validate_tax_id(self, value):
        value = normalize_rfc(value)
        if not value:
            return value
        try:
            validate_rfc(value)
        except DjangoValidationError as exc:
            raise serializers.ValidationError(exc.messages) from None
        return value
