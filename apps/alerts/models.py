"""
Alerts App - Derived inventory alerts
"""
from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone


class AlertType(models.TextChoices):
    LOW_STOCK = 'stock_bajo', 'Stock bajo'
    EXPIRATION = 'caducidad', 'Caducidad'
    SUPPLIER_DUE = 'vencimiento_proveedor', 'Vencimiento de proveedor'
    ADJUSTMENT_REQUIRED = 'ajuste_requerido', 'Ajuste requerido'


class InventoryAlert(models.Model):
    """
    Alerta de inventario.

    ``subject_key`` identifies what the alert is about ('material:12',
    'lot:7', ...). Only one open alert may exist per (type, subject), read
    or not. ``resolved_at`` closes a read alert once its condition clears;
    unread alerts are never resolved.
    """
    alert_type = models.CharField(max_length=30, choices=AlertType.choices, verbose_name='Tipo')
    message = models.TextField(verbose_name='Mensaje')
    subject_key = models.CharField(max_length=64, db_index=True)
    material = models.ForeignKey(
        'materials.RawMaterial',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='alerts'
    )
    lot = models.ForeignKey(
        'materials.Lot',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='alerts'
    )
    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='inventory_alerts',
        verbose_name='Destinatario'
    )
    read = models.BooleanField(default=False, verbose_name='Leída')
    read_at = models.DateTimeField(null=True, blank=True, verbose_name='Fecha de Lectura')
    resolved_at = models.DateTimeField(null=True, blank=True, verbose_name='Fecha de Resolución')
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = 'Alerta de Inventario'
        verbose_name_plural = 'Alertas de Inventario'
        ordering = ['-created_at', '-id']
        constraints = [
            models.UniqueConstraint(
                fields=['alert_type', 'subject_key'],
                condition=Q(read=False),
                name='uniq_unread_alert_per_subject'
            ),
            models.UniqueConstraint(
                fields=['alert_type', 'subject_key'],
                condition=Q(resolved_at__isnull=True),
                name='uniq_open_alert_per_subject'
            ),
        ]

    def __str__(self):
        return f'[{self.get_alert_type_display()}] {self.message[:60]}'

    def mark_read(self):
        if self.read:
            return False
        self.read = True
        self.read_at = timezone.now()
        self.save(update_fields=['read', 'read_at'])
        return True
