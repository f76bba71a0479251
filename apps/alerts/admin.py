from django.contrib import admin

from .models import InventoryAlert


@admin.register(InventoryAlert)
class InventoryAlertAdmin(admin.ModelAdmin):
    list_display = ['alert_type', 'message', 'material', 'lot', 'read', 'resolved_at', 'created_at']
    list_filter = ['alert_type', 'read']
    search_fields = ['message', 'material__name', 'lot__code']
    readonly_fields = ['subject_key', 'created_at', 'read_at', 'resolved_at']
    raw_id_fields = ['material', 'lot', 'recipient']
