from django.db import migrations, models


class Migration(migrations.Migration):
    """
    Agrega:
    - InventoryAlert.resolved_at (cierre de alertas leídas cuya condición desapareció)
    - Una alerta abierta por tipo y sujeto
    """

    dependencies = [
        ('alerts', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='inventoryalert',
            name='resolved_at',
            field=models.DateTimeField(blank=True, null=True, verbose_name='Fecha de Resolución'),
        ),
        migrations.AddConstraint(
            model_name='inventoryalert',
            constraint=models.UniqueConstraint(
                condition=models.Q(('resolved_at__isnull', True)),
                fields=('alert_type', 'subject_key'),
                name='uniq_open_alert_per_subject'
            ),
        ),
    ]
