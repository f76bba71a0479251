import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    """
    Crea:
    - AdjustmentType (Tipos de ajuste, permiso authorize_adjustment)
    - StockMovement (Libro de movimientos, solo inserción)
    """

    initial = True

    dependencies = [
        ('materials', '0001_initial'),
        ('measurements', '0001_initial'),
        ('partners', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='AdjustmentType',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('is_active', models.BooleanField(default=True, verbose_name='Activo')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(max_length=50, unique=True, verbose_name='Nombre')),
                ('description', models.TextField(blank=True, verbose_name='Descripción')),
                ('affects_cost', models.BooleanField(default=True, verbose_name='Afecta Costos')),
                ('requires_authorization', models.BooleanField(default=False, verbose_name='Requiere Autorización')),
            ],
            options={
                'verbose_name': 'Tipo de Ajuste',
                'verbose_name_plural': 'Tipos de Ajuste',
                'ordering': ['name'],
                'permissions': [('authorize_adjustment', 'Puede autorizar ajustes de inventario')],
            },
        ),
        migrations.CreateModel(
            name='StockMovement',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('movement_type', models.CharField(
                    choices=[('entrada', 'Entrada'), ('salida', 'Salida')],
                    max_length=10,
                    verbose_name='Tipo'
                )),
                ('quantity', models.DecimalField(decimal_places=4, max_digits=14, verbose_name='Cantidad')),
                ('entered_quantity', models.DecimalField(blank=True, decimal_places=4, max_digits=14, null=True)),
                ('unit_cost', models.DecimalField(
                    blank=True, decimal_places=4, max_digits=14, null=True, verbose_name='Costo Unitario'
                )),
                ('balance_after', models.DecimalField(decimal_places=4, max_digits=14, verbose_name='Saldo')),
                ('cost_impact', models.BooleanField(default=False, verbose_name='Impacto en Costos')),
                ('description', models.CharField(blank=True, max_length=255, verbose_name='Descripción')),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('material', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='movements',
                    to='materials.rawmaterial',
                    verbose_name='Materia Prima'
                )),
                ('lot', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='movements',
                    to='materials.lot',
                    verbose_name='Lote'
                )),
                ('entered_unit', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='+',
                    to='measurements.measurementunit'
                )),
                ('supplier', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='movements',
                    to='partners.supplier',
                    verbose_name='Proveedor'
                )),
                ('adjustment_type', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='movements',
                    to='inventory.adjustmenttype',
                    verbose_name='Tipo de Ajuste'
                )),
                ('user', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    to=settings.AUTH_USER_MODEL
                )),
            ],
            options={
                'verbose_name': 'Movimiento de Inventario',
                'verbose_name_plural': 'Movimientos de Inventario',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['material', 'created_at'], name='movement_material_date_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(('quantity__gt', 0)), name='movement_quantity_positive'
                    ),
                    models.CheckConstraint(
                        condition=models.Q(('balance_after__gte', 0)), name='movement_balance_non_negative'
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(('adjustment_type__isnull', True), ('movement_type', 'entrada')),
                            models.Q(
                                ('movement_type', 'salida'),
                                ('supplier__isnull', True),
                                ('unit_cost__isnull', True)
                            ),
                            _connector='OR'
                        ),
                        name='movement_tagged_variant'
                    ),
                ],
            },
        ),
    ]
