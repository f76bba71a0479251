"""
Alert engine.

Alerts are derived from current state: evaluating a material or lot any
number of times with the same state leaves a single open alert per
(alert type, subject), read or not. Once a read alert's condition clears,
evaluation resolves it and a later recurrence opens a new one.
"""
import logging
import uuid

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Count, Q
from django.utils import timezone

from apps.core.exceptions import InventoryValidationError, NotFound
from apps.core.utils import format_quantity

from .models import AlertType, InventoryAlert

logger = logging.getLogger(__name__)


class AlertEngine:

    @staticmethod
    def material_key(material):
        return f'material:{material.pk}'

    @staticmethod
    def lot_key(lot):
        return f'lot:{lot.pk}'

    @staticmethod
    def _resolve(alert_type, subject_key):
        """Close acknowledged alerts whose condition no longer holds"""
        resolved = InventoryAlert.objects.filter(
            alert_type=alert_type,
            subject_key=subject_key,
            resolved_at__isnull=True,
            read=True,
        ).update(resolved_at=timezone.now())
        if resolved:
            logger.info(f"Alert resolved: {alert_type} {subject_key}")
        return resolved

    @staticmethod
    def _upsert(alert_type, subject_key, message, material=None, lot=None):
        """Return the open alert for (type, subject), creating it if absent"""
        lookup = {'alert_type': alert_type, 'subject_key': subject_key, 'resolved_at__isnull': True}
        existing = InventoryAlert.objects.filter(**lookup).first()
        if existing is not None:
            return existing, False
        try:
            with transaction.atomic():
                alert = InventoryAlert.objects.create(
                    alert_type=alert_type,
                    subject_key=subject_key,
                    message=message,
                    material=material,
                    lot=lot,
                )
        except IntegrityError:
            # a concurrent evaluation inserted it first
            return InventoryAlert.objects.get(**lookup), False

        logger.info(f"Alert created: {alert_type} {subject_key}")
        return alert, True

    @classmethod
    def evaluate_material(cls, material):
        """Ensure a stock_bajo alert exists while current_stock <= minimum_stock"""
        if not material.is_active or not material.is_low_stock:
            cls._resolve(AlertType.LOW_STOCK, cls.material_key(material))
            return None
        message = (
            f'La materia prima "{material.name}" ha llegado a su nivel mínimo de stock '
            f'({format_quantity(material.current_stock)} {material.unit.abbreviation})'
        )
        alert, _ = cls._upsert(AlertType.LOW_STOCK, cls.material_key(material), message, material=material)
        return alert

    @classmethod
    def evaluate_lot(cls, lot, horizon_days=None, today=None):
        """Ensure a caducidad alert exists for an open lot expiring within the horizon"""
        if horizon_days is None:
            horizon_days = settings.ALERT_EXPIRATION_HORIZON_DAYS
        if not lot.is_active or lot.current_quantity <= 0 or lot.expiration_date is None:
            cls._resolve(AlertType.EXPIRATION, cls.lot_key(lot))
            return None

        days = lot.days_to_expiration(today)
        if days > horizon_days:
            cls._resolve(AlertType.EXPIRATION, cls.lot_key(lot))
            return None

        subject = f'La materia prima "{lot.material.name}" (lote {lot.code})'
        if days < 0:
            message = f'{subject} caducó hace {-days} días'
        elif days == 0:
            message = f'{subject} caduca hoy'
        else:
            message = f'{subject} caducará en {days} días'

        alert, _ = cls._upsert(AlertType.EXPIRATION, cls.lot_key(lot), message, material=lot.material, lot=lot)
        return alert

    @classmethod
    def raise_adjustment_request(cls, material, adjustment_type, actor, quantity):
        """Record a rejected exit that needs an administrator's authorization"""
        requested_by = getattr(actor, 'username', None) or 'usuario anónimo'
        message = (
            f'Se requiere autorización para registrar una salida de {format_quantity(quantity)} '
            f'{material.unit.abbreviation} de "{material.name}" por "{adjustment_type.name}" '
            f'(solicitada por {requested_by})'
        )
        subject_key = f'adjustment:{material.pk}:{adjustment_type.pk}'
        # a read request has been handled; a new attempt is a new request
        cls._resolve(AlertType.ADJUSTMENT_REQUIRED, subject_key)
        alert, _ = cls._upsert(AlertType.ADJUSTMENT_REQUIRED, subject_key, message, material=material)
        return alert

    @staticmethod
    def create_manual(alert_type, message, material=None, lot=None, recipient=None):
        if alert_type not in AlertType.values:
            raise InventoryValidationError(
                f"Tipo de alerta inválido. Valores permitidos: {', '.join(AlertType.values)}."
            )
        if not (message or '').strip():
            raise InventoryValidationError('El mensaje de la alerta es requerido.')
        if lot is not None and material is None:
            material = lot.material

        alert = InventoryAlert.objects.create(
            alert_type=alert_type,
            subject_key=f'manual:{uuid.uuid4().hex}',
            message=message.strip(),
            material=material,
            lot=lot,
            recipient=recipient,
        )
        logger.info(f"Manual alert created: {alert_type} #{alert.pk}")
        return alert

    @staticmethod
    def get_alert(alert_id):
        try:
            return InventoryAlert.objects.get(pk=alert_id)
        except InventoryAlert.DoesNotExist:
            raise NotFound('Alerta no encontrada.') from None

    @staticmethod
    def mark_read(alert):
        """Idempotent: re-marking a read alert keeps its original read_at"""
        alert.mark_read()
        return alert

    @staticmethod
    def mark_all_read(alert_type=None):
        queryset = InventoryAlert.objects.filter(read=False)
        if alert_type:
            if alert_type not in AlertType.values:
                raise InventoryValidationError(f"Tipo de alerta inválido: '{alert_type}'.")
            queryset = queryset.filter(alert_type=alert_type)
        return queryset.update(read=True, read_at=timezone.now())

    @classmethod
    def sweep(cls, today=None):
        """
        Re-evaluate active materials and open dated lots, plus anything still
        holding an open alert so cleared conditions get resolved.
        """
        from apps.materials.models import Lot, RawMaterial

        before = InventoryAlert.objects.count()
        materials = RawMaterial.objects.filter(
            Q(is_active=True)
            | Q(alerts__alert_type=AlertType.LOW_STOCK, alerts__resolved_at__isnull=True)
        ).distinct().select_related('unit')
        lots = Lot.objects.filter(
            Q(is_active=True, current_quantity__gt=0, expiration_date__isnull=False)
            | Q(alerts__alert_type=AlertType.EXPIRATION, alerts__resolved_at__isnull=True)
        ).distinct().select_related('material')

        material_count = 0
        for material in materials.iterator():
            cls.evaluate_material(material)
            material_count += 1

        lot_count = 0
        for lot in lots.iterator():
            cls.evaluate_lot(lot, today=today)
            lot_count += 1

        result = {
            'materials': material_count,
            'lots': lot_count,
            'created': InventoryAlert.objects.count() - before,
        }
        logger.info(
            f"Alert sweep: {result['materials']} materials, {result['lots']} lots, "
            f"{result['created']} new alerts"
        )
        return result

    @staticmethod
    def summary():
        rows = InventoryAlert.objects.values('alert_type').annotate(
            total=Count('id'),
            unread=Count('id', filter=Q(read=False)),
        )
        counts = {row['alert_type']: row for row in rows}

        by_type = {}
        for alert_type in AlertType.values:
            row = counts.get(alert_type, {'total': 0, 'unread': 0})
            by_type[alert_type] = {
                'total': row['total'],
                'read': row['total'] - row['unread'],
                'unread': row['unread'],
            }

        total = sum(item['total'] for item in by_type.values())
        unread = sum(item['unread'] for item in by_type.values())
        return {'total': total, 'read': total - unread, 'unread': unread, 'by_type': by_type}
