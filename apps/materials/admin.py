"""
Materials App - Admin Configuration
"""
from django.contrib import admin

from .models import Lot, RawMaterial


class LotInline(admin.TabularInline):
    model = Lot
    extra = 0
    fields = ['code', 'initial_quantity', 'current_quantity', 'expiration_date', 'is_active']
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(RawMaterial)
class RawMaterialAdmin(admin.ModelAdmin):
    list_display = ['name', 'unit', 'current_stock', 'minimum_stock', 'unit_cost', 'is_active']
    list_filter = ['is_active', 'unit__category']
    search_fields = ['name', 'description']
    readonly_fields = ['current_stock', 'unit_cost', 'created_at', 'updated_at']
    inlines = [LotInline]


@admin.register(Lot)
class LotAdmin(admin.ModelAdmin):
    list_display = ['code', 'material', 'current_quantity', 'initial_quantity', 'expiration_date', 'is_active']
    list_filter = ['is_active', 'expiration_date']
    search_fields = ['code', 'material__name']
    readonly_fields = ['material', 'initial_quantity', 'current_quantity', 'created_at', 'updated_at']
    date_hierarchy = 'expiration_date'

    def has_add_permission(self, request):
        return False
