"""
Inventory App - Admin Configuration
"""
from django.contrib import admin

from .models import AdjustmentType, StockMovement


@admin.register(AdjustmentType)
class AdjustmentTypeAdmin(admin.ModelAdmin):
    list_display = ['name', 'affects_cost', 'requires_authorization', 'is_active']
    list_filter = ['affects_cost', 'requires_authorization', 'is_active']
    search_fields = ['name']


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    """Read-only: movements are written by the ledger services only"""
    list_display = [
        'created_at', 'movement_type', 'material', 'lot', 'quantity',
        'balance_after', 'cost_impact', 'user'
    ]
    list_filter = ['movement_type', 'cost_impact', 'created_at']
    search_fields = ['material__name', 'lot__code', 'description']
    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
