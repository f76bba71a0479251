from django.core.management.base import BaseCommand, CommandError

from apps.core.utils import format_quantity
from apps.inventory.services import LedgerService


class Command(BaseCommand):
    help = 'Verifica que los saldos coincidan con el historial de movimientos'

    def handle(self, *args, **options):
        self.stdout.write('🔄 Verificando libro de movimientos...')
        mismatches = LedgerService.verify_balances()

        if not mismatches:
            self.stdout.write(self.style.SUCCESS('✅ Todos los saldos coinciden con el historial.'))
            return

        for row in mismatches:
            self.stdout.write(self.style.ERROR(
                f"  ✗ {row['kind']} #{row['id']} ({row['name']}): "
                f"registrado {format_quantity(row['recorded'])}, esperado {format_quantity(row['expected'])}"
            ))
        raise CommandError(f'{len(mismatches)} saldos no coinciden con el historial.')
