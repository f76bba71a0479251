from celery import shared_task
import logging

from .services import AlertEngine

logger = logging.getLogger(__name__)


@shared_task
def sweep_alerts():
    """
    Task periódica (CELERY_BEAT_SCHEDULE) que reevalúa todas las materias
    primas y lotes abiertos para detectar caducidades sin movimientos recientes.
    """
    result = AlertEngine.sweep()
    if result['created']:
        logger.info(f"CELERY BEAT: {result['created']} nuevas alertas de inventario.")
    return f"Swept {result['materials']} materials and {result['lots']} lots."
