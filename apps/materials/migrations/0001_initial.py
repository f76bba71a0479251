import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    """
    Crea:
    - RawMaterial (Materias primas)
    - Lot (Lotes por materia prima)
    """

    initial = True

    dependencies = [
        ('measurements', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='RawMaterial',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('is_active', models.BooleanField(default=True, verbose_name='Activo')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(max_length=100, unique=True, verbose_name='Nombre')),
                ('description', models.TextField(blank=True, verbose_name='Descripción')),
                ('current_stock', models.DecimalField(
                    decimal_places=4, default=0, max_digits=14, verbose_name='Stock Actual'
                )),
                ('minimum_stock', models.DecimalField(
                    decimal_places=4, default=0, max_digits=14, verbose_name='Stock Mínimo'
                )),
                ('unit_cost', models.DecimalField(
                    decimal_places=4, default=0, max_digits=14, verbose_name='Costo Unitario'
                )),
                ('unit', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='materials',
                    to='measurements.measurementunit',
                    verbose_name='Unidad de Medida'
                )),
            ],
            options={
                'verbose_name': 'Materia Prima',
                'verbose_name_plural': 'Materias Primas',
                'ordering': ['name'],
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(('current_stock__gte', 0)), name='material_stock_non_negative'
                    ),
                    models.CheckConstraint(
                        condition=models.Q(('minimum_stock__gte', 0)), name='material_minimum_non_negative'
                    ),
                    models.CheckConstraint(
                        condition=models.Q(('unit_cost__gte', 0)), name='material_cost_non_negative'
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='Lot',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('is_active', models.BooleanField(default=True, verbose_name='Activo')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('code', models.CharField(max_length=50, verbose_name='Código de Lote')),
                ('initial_quantity', models.DecimalField(
                    decimal_places=4, max_digits=14, verbose_name='Cantidad Inicial'
                )),
                ('current_quantity', models.DecimalField(
                    decimal_places=4, max_digits=14, verbose_name='Cantidad Actual'
                )),
                ('production_date', models.DateField(blank=True, null=True, verbose_name='Fecha de Producción')),
                ('expiration_date', models.DateField(
                    blank=True, db_index=True, null=True, verbose_name='Fecha de Caducidad'
                )),
                ('unit_cost', models.DecimalField(
                    blank=True, decimal_places=4, max_digits=14, null=True, verbose_name='Costo Unitario'
                )),
                ('material', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='lots',
                    to='materials.rawmaterial',
                    verbose_name='Materia Prima'
                )),
            ],
            options={
                'verbose_name': 'Lote',
                'verbose_name_plural': 'Lotes',
                'ordering': ['expiration_date', 'created_at'],
                'constraints': [
                    models.UniqueConstraint(fields=('material', 'code'), name='uniq_lot_code_per_material'),
                    models.CheckConstraint(
                        condition=models.Q(('initial_quantity__gt', 0)), name='lot_initial_positive'
                    ),
                    models.CheckConstraint(
                        condition=models.Q(('current_quantity__gte', 0)), name='lot_current_non_negative'
                    ),
                    models.CheckConstraint(
                        condition=models.Q(('current_quantity__lte', models.F('initial_quantity'))),
                        name='lot_current_within_initial'
                    ),
                ],
            },
        ),
    ]
