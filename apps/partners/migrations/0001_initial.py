import apps.partners.models
from django.db import migrations, models


class Migration(migrations.Migration):
    """
    Migración inicial del app Partners.

    Crea:
    - Supplier (Proveedores)
    """

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Supplier',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('is_active', models.BooleanField(default=True, verbose_name='Activo')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(max_length=100, unique=True, verbose_name='Nombre')),
                ('tax_id', models.CharField(
                    blank=True,
                    max_length=13,
                    validators=[apps.partners.models.validate_rfc],
                    verbose_name='RFC'
                )),
                ('email', models.EmailField(blank=True, max_length=254, verbose_name='Correo')),
                ('phone', models.CharField(blank=True, max_length=20, verbose_name='Teléfono')),
                ('address', models.TextField(blank=True, verbose_name='Dirección')),
                ('products_services', models.TextField(blank=True, verbose_name='Productos/Servicios')),
                ('payment_terms', models.CharField(blank=True, max_length=100, verbose_name='Condiciones de Pago')),
                ('lead_time_days', models.PositiveIntegerField(
                    blank=True,
                    null=True,
                    verbose_name='Tiempo de Entrega (días)'
                )),
                ('notes', models.TextField(blank=True, verbose_name='Notas')),
            ],
            options={
                'verbose_name': 'Proveedor',
                'verbose_name_plural': 'Proveedores',
                'ordering': ['name'],
            },
        ),
    ]
