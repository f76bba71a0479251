"""
Partners App - Admin Configuration
"""
from django.contrib import admin

from .models import Supplier


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ['name', 'tax_id', 'phone', 'lead_time_days', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name', 'tax_id', 'email']
    ordering = ['name']

    fieldsets = (
        ('Identificación', {
            'fields': ('name', 'tax_id')
        }),
        ('Contacto', {
            'fields': ('email', 'phone', 'address')
        }),
        ('Condiciones Comerciales', {
            'fields': ('products_services', 'payment_terms', 'lead_time_days')
        }),
        ('Otros', {
            'fields': ('notes', 'is_active'),
            'classes': ('collapse',)
        }),
    )
