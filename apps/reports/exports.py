"""
Movement Exporter - Ledger export as CSV or Excel
"""
import csv
import io

import openpyxl
from openpyxl.styles import Font
from django.utils import timezone

from apps.core.exceptions import InventoryValidationError


class MovementExporter:
    """Export a queryset of stock movements"""

    FORMATS = ('csv', 'xlsx')
    CONTENT_TYPES = {
        'csv': 'text/csv; charset=utf-8',
        'xlsx': 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    }
    FIELDNAMES = [
        'fecha', 'tipo', 'materia_prima', 'lote', 'cantidad', 'unidad',
        'cantidad_capturada', 'unidad_capturada', 'costo_unitario', 'saldo',
        'impacto_costos', 'proveedor', 'tipo_ajuste', 'usuario', 'descripcion',
    ]
    HEADERS = [
        'Fecha', 'Tipo', 'Materia Prima', 'Lote', 'Cantidad', 'Unidad',
        'Cantidad Capturada', 'Unidad Capturada', 'Costo Unitario', 'Saldo',
        'Impacto en Costos', 'Proveedor', 'Tipo de Ajuste', 'Usuario', 'Descripción',
    ]

    def __init__(self, movements):
        self.movements = movements

    def _row(self, movement):
        return {
            'fecha': timezone.localtime(movement.created_at).strftime('%Y-%m-%d %H:%M:%S'),
            'tipo': movement.movement_type,
            'materia_prima': movement.material.name,
            'lote': movement.lot.code if movement.lot else '',
            'cantidad': movement.quantity,
            'unidad': movement.material.unit.abbreviation,
            'cantidad_capturada': movement.entered_quantity if movement.entered_quantity is not None else '',
            'unidad_capturada': movement.entered_unit.abbreviation if movement.entered_unit else '',
            'costo_unitario': movement.unit_cost if movement.unit_cost is not None else '',
            'saldo': movement.balance_after,
            'impacto_costos': 'sí' if movement.cost_impact else 'no',
            'proveedor': movement.supplier.name if movement.supplier else '',
            'tipo_ajuste': movement.adjustment_type.name if movement.adjustment_type else '',
            'usuario': movement.user.username if movement.user else '',
            'descripcion': movement.description,
        }

    def export_csv(self):
        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=self.FIELDNAMES)
        writer.writeheader()
        for movement in self.movements:
            writer.writerow(self._row(movement))
        return output.getvalue()

    def export_excel(self):
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = 'Movimientos'

        for col, header in enumerate(self.HEADERS, 1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = Font(bold=True)

        for row_num, movement in enumerate(self.movements, 2):
            row = self._row(movement)
            for col, field in enumerate(self.FIELDNAMES, 1):
                ws.cell(row=row_num, column=col, value=row[field])

        # Auto-width columns
        for col in ws.columns:
            max_length = max(len(str(cell.value or '')) for cell in col)
            ws.column_dimensions[col[0].column_letter].width = min(max_length + 2, 50)

        output = io.BytesIO()
        wb.save(output)
        return output.getvalue()

    def export(self, fmt):
        if fmt not in self.FORMATS:
            raise InventoryValidationError(f"Formato de exportación inválido: '{fmt}'. Use csv o xlsx.")
        content = self.export_csv() if fmt == 'csv' else self.export_excel()
        return content, self.CONTENT_TYPES[fmt]

    @staticmethod
    def filename(fmt):
        return f'movimientos_{timezone.now().strftime("%Y%m%d_%H%M")}.{fmt}'
