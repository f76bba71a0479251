import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    """
    Crea:
    - MeasurementUnit (Unidades de medida)
    - UnitConversion (Tabla de conversiones, pares recíprocos)
    """

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='MeasurementUnit',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('is_active', models.BooleanField(default=True, verbose_name='Activo')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(max_length=50, unique=True, verbose_name='Nombre')),
                ('abbreviation', models.CharField(max_length=10, unique=True, verbose_name='Abreviatura')),
                ('category', models.CharField(
                    choices=[
                        ('mass', 'Masa'),
                        ('volume', 'Volumen'),
                        ('count', 'Unidad'),
                        ('length', 'Longitud'),
                        ('area', 'Área'),
                    ],
                    max_length=20,
                    verbose_name='Categoría'
                )),
            ],
            options={
                'verbose_name': 'Unidad de Medida',
                'verbose_name_plural': 'Unidades de Medida',
                'ordering': ['category', 'name'],
            },
        ),
        migrations.CreateModel(
            name='UnitConversion',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('factor', models.DecimalField(decimal_places=12, max_digits=24, verbose_name='Factor de Conversión')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('origin', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='conversions_from',
                    to='measurements.measurementunit',
                    verbose_name='Unidad Origen'
                )),
                ('destination', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='conversions_to',
                    to='measurements.measurementunit',
                    verbose_name='Unidad Destino'
                )),
            ],
            options={
                'verbose_name': 'Conversión de Medida',
                'verbose_name_plural': 'Conversiones de Medida',
                'ordering': ['origin__name', 'destination__name'],
                'constraints': [
                    models.UniqueConstraint(fields=('origin', 'destination'), name='uniq_conversion_pair'),
                    models.CheckConstraint(condition=models.Q(('factor__gt', 0)), name='conversion_factor_positive'),
                    models.CheckConstraint(
                        condition=models.Q(('origin', models.F('destination')), _negated=True),
                        name='conversion_distinct_units'
                    ),
                ],
            },
        ),
    ]
