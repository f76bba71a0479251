import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    """
    Crea:
    - InventoryAlert (Alertas de inventario, una no leída por tipo y sujeto)
    """

    initial = True

    dependencies = [
        ('materials', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='InventoryAlert',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('alert_type', models.CharField(
                    choices=[
                        ('stock_bajo', 'Stock bajo'),
                        ('caducidad', 'Caducidad'),
                        ('vencimiento_proveedor', 'Vencimiento de proveedor'),
                        ('ajuste_requerido', 'Ajuste requerido'),
                    ],
                    max_length=30,
                    verbose_name='Tipo'
                )),
                ('message', models.TextField(verbose_name='Mensaje')),
                ('subject_key', models.CharField(db_index=True, max_length=64)),
                ('read', models.BooleanField(default=False, verbose_name='Leída')),
                ('read_at', models.DateTimeField(blank=True, null=True, verbose_name='Fecha de Lectura')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('material', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='alerts',
                    to='materials.rawmaterial'
                )),
                ('lot', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='alerts',
                    to='materials.lot'
                )),
                ('recipient', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='inventory_alerts',
                    to=settings.AUTH_USER_MODEL,
                    verbose_name='Destinatario'
                )),
            ],
            options={
                'verbose_name': 'Alerta de Inventario',
                'verbose_name_plural': 'Alertas de Inventario',
                'ordering': ['-created_at', '-id'],
                'constraints': [
                    models.UniqueConstraint(
                        condition=models.Q(('read', False)),
                        fields=('alert_type', 'subject_key'),
                        name='uniq_unread_alert_per_subject'
                    ),
                ],
            },
        ),
    ]
