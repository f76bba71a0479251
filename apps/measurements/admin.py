from django.contrib import admin

from .models import MeasurementUnit, UnitConversion


@admin.register(MeasurementUnit)
class MeasurementUnitAdmin(admin.ModelAdmin):
    list_display = ['name', 'abbreviation', 'category', 'is_active']
    list_filter = ['category', 'is_active']
    search_fields = ['name', 'abbreviation']


@admin.register(UnitConversion)
class UnitConversionAdmin(admin.ModelAdmin):
    """Read-only: pairs must be written through ConversionService to stay symmetric"""
    list_display = ['origin', 'destination', 'factor', 'updated_at']
    list_filter = ['origin__category']
    readonly_fields = ['origin', 'destination', 'factor', 'created_at', 'updated_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
