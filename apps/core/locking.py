"""
Row-level serialization for ledger transactions.

Mutations lock the material row first and its lot rows second with
SELECT ... FOR UPDATE, so operations on the same material are linearizable
while disjoint materials proceed in parallel. Lock waits are bounded.
"""
import logging
from contextlib import contextmanager

from django.conf import settings
from django.db import OperationalError, connection, transaction

from apps.core.exceptions import LedgerTimeout, NotFound

logger = logging.getLogger(__name__)


def _is_lock_failure(exc):
    message = str(exc).lower()
    return 'lock' in message or 'timeout' in message


@contextmanager
def ledger_transaction():
    """
    Atomic block with a bounded lock wait.

    PostgreSQL gets a transaction-local lock_timeout; SQLite relies on the
    connection 'timeout' option. Lock failures surface as LedgerTimeout.
    """
    try:
        with transaction.atomic():
            if connection.vendor == 'postgresql':
                with connection.cursor() as cursor:
                    cursor.execute(
                        "SELECT set_config('lock_timeout', %s, true)",
                        [f'{settings.LEDGER_LOCK_TIMEOUT_MS}ms'],
                    )
            yield
    except OperationalError as exc:
        if not _is_lock_failure(exc):
            raise
        logger.warning(f"Ledger lock wait exceeded: {exc}")
        raise LedgerTimeout() from exc


def lock_for_update(model, pk, **filters):
    """Fetch a row with SELECT ... FOR UPDATE or raise NotFound"""
    try:
        return model.objects.select_for_update().get(pk=pk, **filters)
    except model.DoesNotExist:
        raise NotFound(f"{model._meta.verbose_name} {pk} no encontrado(a).") from None
