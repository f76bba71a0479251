from django.core.management.base import BaseCommand

from apps.alerts.services import AlertEngine


class Command(BaseCommand):
    help = 'Reevalúa las alertas de stock bajo y caducidad de todo el inventario'

    def handle(self, *args, **options):
        self.stdout.write('🔄 Revisando alertas de inventario...')
        result = AlertEngine.sweep()
        self.stdout.write(self.style.SUCCESS(
            f"✅ {result['materials']} materias primas y {result['lots']} lotes revisados, "
            f"{result['created']} alertas nuevas."
        ))
