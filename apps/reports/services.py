"""
Consumption statistics and stock projections derived from the ledger.

Consumption is the sum of salidas over a trailing window; the daily
average is that sum divided by the window length in days.
"""
import math
from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal

from django.db.models import Sum
from django.utils import timezone

from apps.core.exceptions import InventoryValidationError
from apps.inventory.models import MovementType, StockMovement
from apps.materials.models import RawMaterial
from apps.materials.services import LotService

RATE_PRECISION = Decimal('0.0001')


def _positive_days(days, field='dias'):
    try:
        days = int(days)
    except (TypeError, ValueError):
        raise InventoryValidationError(f"El parámetro '{field}' debe ser un número entero.") from None
    if days <= 0:
        raise InventoryValidationError(f"El parámetro '{field}' debe ser un número positivo.")
    return days


def _lot_row(lot, today):
    return {
        'id': lot.pk,
        'code': lot.code,
        'expiration_date': lot.expiration_date,
        'quantity': lot.current_quantity,
        'days_to_expiration': lot.days_to_expiration(today),
    }


class ConsumptionService:

    @staticmethod
    def consumed(material, start, end) -> Decimal:
        total = StockMovement.objects.filter(
            material=material,
            movement_type=MovementType.EXIT,
            created_at__gte=start,
            created_at__lt=end,
        ).aggregate(total=Sum('quantity'))['total']
        return total or Decimal('0')

    @classmethod
    def daily_average(cls, material, days=30, now=None) -> Decimal:
        now = now or timezone.now()
        total = cls.consumed(material, now - timedelta(days=days), now)
        return (total / days).quantize(RATE_PRECISION, rounding=ROUND_HALF_UP)

    @staticmethod
    def _expiring_lots(material, days, today):
        return [
            _lot_row(lot, today)
            for lot in LotService.available_lots(material).filter(
                expiration_date__isnull=False,
                expiration_date__lte=today + timedelta(days=days),
            )
        ]

    @classmethod
    def statistics(cls, material, days=30, now=None):
        """
        Consumption over the trailing ``days``: total, daily average, trend
        (second half of the window against the first half, in percent) and
        the number of days the current stock would last.
        """
        days = _positive_days(days)
        now = now or timezone.now()
        start = now - timedelta(days=days)
        midpoint = start + timedelta(days=days / 2)

        first_half = cls.consumed(material, start, midpoint)
        second_half = cls.consumed(material, midpoint, now)
        total = first_half + second_half
        daily = (total / days).quantize(RATE_PRECISION, rounding=ROUND_HALF_UP)

        trend = None
        if first_half > 0:
            trend = ((second_half - first_half) / first_half * 100).quantize(Decimal('0.01'))

        days_of_cover = math.floor(material.current_stock / daily) if daily > 0 else None

        return {
            'material': material.pk,
            'name': material.name,
            'unit': material.unit.abbreviation,
            'period_days': days,
            'total_consumed': total,
            'daily_average': daily,
            'trend_percent': trend,
            'current_stock': material.current_stock,
            'minimum_stock': material.minimum_stock,
            'estimated_days_of_cover': days_of_cover,
            'expiring_lots': cls._expiring_lots(material, 30, timezone.localdate(now)),
        }

    @classmethod
    def projection(cls, material, days=30, now=None):
        """Stock expected after ``days`` at the trailing 30-day consumption rate"""
        days = _positive_days(days)
        now = now or timezone.now()
        daily = cls.daily_average(material, now=now)

        projected = max(Decimal('0'), material.current_stock - daily * days)
        critical_in = None
        if daily > 0:
            critical_in = math.floor((material.current_stock - material.minimum_stock) / daily)

        today = timezone.localdate(now)
        expiring = cls._expiring_lots(material, days, today)
        return {
            'material': material.pk,
            'name': material.name,
            'unit': material.unit.abbreviation,
            'current_stock': material.current_stock,
            'minimum_stock': material.minimum_stock,
            'daily_average': daily,
            'projection_days': days,
            'projected_stock': projected,
            'stock_alert': projected < material.minimum_stock,
            'days_until_critical': critical_in,
            'expiring_lots': expiring,
            'expiring_quantity': sum((row['quantity'] for row in expiring), Decimal('0')),
            'projection_date': today + timedelta(days=days),
        }

    @classmethod
    def restock_report(cls, horizon_days=30, threshold_days=7, now=None):
        """
        Materials that reach their minimum within ``threshold_days`` at the
        current rate, with the quantity needed to cover ``horizon_days``.
        """
        horizon_days = _positive_days(horizon_days, 'dias_proyeccion')
        threshold_days = _positive_days(threshold_days, 'umbral_dias')
        now = now or timezone.now()

        needs = []
        for material in RawMaterial.objects.filter(is_active=True).select_related('unit'):
            daily = cls.daily_average(material, now=now)
            if daily <= 0:
                continue
            remaining = math.floor((material.current_stock - material.minimum_stock) / daily)
            if remaining > threshold_days:
                continue
            if remaining <= 0:
                priority = 'alta'
            elif remaining <= 3:
                priority = 'media'
            else:
                priority = 'baja'
            needs.append({
                'material': material.pk,
                'name': material.name,
                'unit': material.unit.abbreviation,
                'current_stock': material.current_stock,
                'minimum_stock': material.minimum_stock,
                'daily_average': daily,
                'days_remaining': remaining,
                'restock_quantity': (daily * horizon_days).quantize(Decimal('0.01')),
                'priority': priority,
            })

        needs.sort(key=lambda row: row['days_remaining'])
        return needs
