"""
Partners App - Supplier directory

Suppliers are labels attached to entry movements; the ledger never reasons
about them beyond referencing the row.
"""
from __future__ import annotations

import re

from django.core.exceptions import ValidationError
from django.db import models

from apps.core.models import ActiveModel

RFC_PATTERN = re.compile(r'^[A-ZÑ&]{3,4}\d{6}[A-Z0-9]{3}$')


def normalize_rfc(value: str) -> str:
    return re.sub(r'[\s-]', '', value or '').upper()


def validate_rfc(value: str) -> None:
    """
    Valida el RFC mexicano (persona moral: 12 caracteres, física: 13).

    Raises:
        ValidationError: Si el RFC no tiene un formato válido
    """
    if not RFC_PATTERN.match(normalize_rfc(value)):
        raise ValidationError('RFC inválido')


class Supplier(ActiveModel):
    """
    Proveedor de materias primas.

    Attributes:
        name: Nombre comercial (único)
        tax_id: RFC del proveedor (opcional)
        lead_time_days: Tiempo promedio de entrega en días
        products_services: Productos o servicios que ofrece
    """
    name = models.CharField(max_length=100, unique=True, verbose_name='Nombre')
    tax_id = models.CharField(
        max_length=13,
        blank=True,
        validators=[validate_rfc],
        verbose_name='RFC'
    )

    # Contacto
    email = models.EmailField(blank=True, verbose_name='Correo')
    phone = models.CharField(max_length=20, blank=True, verbose_name='Teléfono')
    address = models.TextField(blank=True, verbose_name='Dirección')

    # Condiciones comerciales
    products_services = models.TextField(blank=True, verbose_name='Productos/Servicios')
    payment_terms = models.CharField(max_length=100, blank=True, verbose_name='Condiciones de Pago')
    lead_time_days = models.PositiveIntegerField(
        null=True,
        blank=True,
        verbose_name='Tiempo de Entrega (días)'
    )

    notes = models.TextField(blank=True, verbose_name='Notas')

    class Meta:
        verbose_name = 'Proveedor'
        verbose_name_plural = 'Proveedores'
        ordering = ['name']

    def __str__(self) -> str:
        return self.name

    def save(self, *args, **kwargs):
        if self.tax_id:
            self.tax_id = normalize_rfc(self.tax_id)
        super().save(*args, **kwargs)
