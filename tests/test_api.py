import csv
import io
from datetime import timedelta
from decimal import Decimal

import openpyxl
import pytest
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from apps.alerts.models import AlertType, InventoryAlert
from apps.inventory.models import MovementType, StockMovement
from apps.inventory.services import LotSpec
from apps.materials.models import Lot
from tests.factories import AdjustmentTypeFactory, SupplierFactory


@pytest.mark.django_db
class TestUnitsAndConversionsAPI:

    def test_create_and_filter_units(self, auth_client, kg, liter):
        response = auth_client.post(reverse('api-unit-list'), {
            'name': 'Tonelada', 'abbreviation': 't', 'category': 'mass'
        }, format='json')
        assert response.status_code == status.HTTP_201_CREATED

        response = auth_client.get(reverse('api-unit-list'), {'category': 'mass'})
        assert sorted(u['abbreviation'] for u in response.data['results']) == ['kg', 't']

    def test_define_and_use_conversion(self, auth_client, kg):
        gram_res = auth_client.post(reverse('api-unit-list'), {
            'name': 'Gramo', 'abbreviation': 'g', 'category': 'mass'
        }, format='json')
        gram_id = gram_res.data['id']

        response = auth_client.post(reverse('api-conversion-list'), {
            'origin': kg.pk, 'destination': gram_id, 'factor': '1000'
        }, format='json')
        assert response.status_code == status.HTTP_201_CREATED

        response = auth_client.post(reverse('api-conversion-convert'), {
            'quantity': '2000', 'origin': gram_id, 'destination': kg.pk
        }, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['result'] == '2'

    def test_duplicate_conversion_error_body(self, auth_client, kg, gram):
        response = auth_client.post(reverse('api-conversion-list'), {
            'origin': gram.pk, 'destination': kg.pk, 'factor': '0.001'
        }, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['error'] == 'duplicate_edge'
        assert 'detail' in response.data

    def test_category_mismatch_error_body(self, auth_client, kg, liter):
        response = auth_client.post(reverse('api-conversion-convert'), {
            'quantity': '1', 'origin': kg.pk, 'destination': liter.pk
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'category_mismatch'

    def test_remove_conversion_pair(self, auth_client, kg, gram):
        edge_id = auth_client.get(reverse('api-conversion-list'), {'unit': kg.pk}).data['results'][0]['id']

        response = auth_client.delete(reverse('api-conversion-detail', args=[edge_id]))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert auth_client.get(reverse('api-conversion-list')).data['count'] == 0


@pytest.mark.django_db
class TestMaterialsAPI:

    def test_create_material(self, auth_client, kg):
        response = auth_client.post(reverse('api-material-list'), {
            'name': 'Sal', 'unit': kg.pk, 'minimum_stock': '2', 'unit_cost': '9.5'
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['current_stock'] == '0.0000'
        assert response.data['unit_abbreviation'] == 'kg'

    def test_stock_is_read_only(self, auth_client, material, receive):
        receive(material, 10)
        url = reverse('api-material-detail', args=[material.pk])

        response = auth_client.patch(url, {'current_stock': '500', 'description': 'Trigo'}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['current_stock'] == '10.0000'
        assert response.data['description'] == 'Trigo'

        response = auth_client.patch(url, {'unit_cost': '99'}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'unit_cost' in response.data

    def test_delete_material_with_history(self, auth_client, material, receive):
        receive(material, 1)
        response = auth_client.delete(reverse('api-material-detail', args=[material.pk]))

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['error'] == 'has_movements'

    def test_low_stock_and_movements(self, auth_client, material, receive, issue):
        receive(material, 10)
        issue(material, 7)

        response = auth_client.get(reverse('api-material-low-stock'))
        assert [m['name'] for m in response.data] == ['Harina']

        response = auth_client.get(reverse('api-material-movements', args=[material.pk]))
        assert response.data['count'] == 2
        assert response.data['results'][0]['movement_type'] == MovementType.EXIT

    def test_consumption_and_projection(self, auth_client, material, receive, issue):
        receive(material, 30)
        issue(material, 15)

        response = auth_client.get(reverse('api-material-consumption', args=[material.pk]), {'days': 30})
        assert response.status_code == status.HTTP_200_OK
        assert Decimal(str(response.data['total_consumed'])) == Decimal('15')

        response = auth_client.get(reverse('api-material-projection', args=[material.pk]), {'days': 10})
        assert response.status_code == status.HTTP_200_OK
        assert Decimal(str(response.data['daily_average'])) == Decimal('0.5')

        response = auth_client.get(reverse('api-material-projection', args=[material.pk]), {'days': -1})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'validation_error'

    def test_restock_report(self, auth_client, material, receive, issue):
        receive(material, 65)
        issue(material, 60)

        response = auth_client.get(reverse('api-material-restock'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data[0]['name'] == 'Harina'
        assert response.data[0]['priority'] == 'alta'


@pytest.mark.django_db
class TestMovementsAPI:

    def test_entry_and_exit(self, auth_client, material, user):
        supplier = SupplierFactory()
        response = auth_client.post(reverse('api-movement-entry'), {
            'material': material.pk, 'quantity': '10', 'unit_cost': '4', 'supplier': supplier.pk
        }, format='json')
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['balance_after'] == '10.0000'
        assert response.data['username'] == user.username

        response = auth_client.post(reverse('api-movement-exit'), {
            'material': material.pk, 'quantity': '7'
        }, format='json')
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['balance_after'] == '3.0000'
        assert InventoryAlert.objects.filter(alert_type=AlertType.LOW_STOCK).count() == 1

    def test_quantity_beyond_ledger_precision(self, auth_client, material, receive):
        receive(material, 3)

        response = auth_client.post(reverse('api-movement-exit'), {
            'material': material.pk, 'quantity': '0.00004'
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'quantity' in response.data
        assert StockMovement.objects.filter(movement_type=MovementType.EXIT).count() == 0

    def test_insufficient_stock_error_body(self, auth_client, material, receive):
        receive(material, 3)

        response = auth_client.post(reverse('api-movement-exit'), {
            'material': material.pk, 'quantity': '10'
        }, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data == {
            'error': 'insufficient_stock',
            'detail': 'Stock insuficiente para Harina. Disponible: 3 kg',
        }

    def test_unauthorized_adjustment_error_body(self, auth_client, material, receive):
        receive(material, 10)
        correction = AdjustmentTypeFactory(requires_authorization=True)

        response = auth_client.post(reverse('api-movement-exit'), {
            'material': material.pk, 'quantity': '1', 'adjustment_type': correction.pk
        }, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['error'] == 'unauthorized'
        assert StockMovement.objects.filter(movement_type=MovementType.EXIT).count() == 0
        assert InventoryAlert.objects.filter(alert_type=AlertType.ADJUSTMENT_REQUIRED).count() == 1

    def test_admin_authorizes_adjustment(self, client, manager, material, receive):
        receive(material, 10)
        correction = AdjustmentTypeFactory(requires_authorization=True)
        client.force_authenticate(user=manager)

        response = client.post(reverse('api-movement-exit'), {
            'material': material.pk, 'quantity': '1', 'adjustment_type': correction.pk
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['adjustment_type_name'] == correction.name

    def test_entry_with_new_lot(self, auth_client, material):
        response = auth_client.post(reverse('api-movement-entry'), {
            'material': material.pk,
            'quantity': '5',
            'new_lot': {'code': 'L-77', 'expiration_date': '2031-01-31'},
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['lot_code'] == 'L-77'

    def test_entry_rejects_both_lot_forms(self, auth_client, material, receive):
        lot = receive(material, 5, new_lot=LotSpec(code='L-1')).lot

        response = auth_client.post(reverse('api-movement-entry'), {
            'material': material.pk, 'quantity': '1', 'lot': lot.pk, 'new_lot': {'code': 'L-2'}
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_fifo_exit(self, auth_client, material):
        today = timezone.localdate()
        for code, days in (('B', 20), ('A', 10)):
            auth_client.post(reverse('api-lot-list'), {
                'material': material.pk, 'code': code, 'quantity': '4',
                'expiration_date': str(today + timedelta(days=days)),
            }, format='json')

        response = auth_client.post(reverse('api-movement-fifo-exit'), {
            'material': material.pk, 'quantity': '6'
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert [m['lot_code'] for m in response.data] == ['A', 'B']

    def test_list_filters(self, auth_client, material, receive, issue):
        receive(material, 10)
        issue(material, 2)

        response = auth_client.get(reverse('api-movement-list'), {'type': 'salida', 'material': material.pk})
        assert response.data['count'] == 1

        response = auth_client.get(reverse('api-movement-list'), {'type': 'traspaso'})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_ledger_is_not_writable(self, auth_client, material, receive):
        movement = receive(material, 10)
        url = reverse('api-movement-detail', args=[movement.pk])

        assert auth_client.delete(url).status_code == status.HTTP_405_METHOD_NOT_ALLOWED
        assert auth_client.patch(url, {'quantity': '1'}, format='json').status_code == status.HTTP_405_METHOD_NOT_ALLOWED

    def test_export_csv(self, auth_client, material, receive):
        receive(material, 10)

        response = auth_client.get(reverse('api-movement-export'), {'format': 'csv'})

        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Type'].startswith('text/csv')
        assert 'attachment; filename="movimientos_' in response['Content-Disposition']
        rows = list(csv.DictReader(io.StringIO(response.content.decode('utf-8'))))
        assert rows[0]['materia_prima'] == 'Harina'

    def test_export_xlsx(self, auth_client, material, receive):
        receive(material, 10)

        response = auth_client.get(reverse('api-movement-export'), {'format': 'xlsx'})

        assert response.status_code == status.HTTP_200_OK
        sheet = openpyxl.load_workbook(io.BytesIO(response.content)).active
        assert sheet.cell(row=2, column=3).value == 'Harina'

    def test_export_unknown_format(self, auth_client):
        response = auth_client.get(reverse('api-movement-export'), {'format': 'pdf'})
        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestLotsAPI:

    def test_create_lot_records_entry(self, auth_client, material):
        response = auth_client.post(reverse('api-lot-list'), {
            'material': material.pk, 'code': 'L-1', 'quantity': '8', 'unit_cost': '3',
            'expiration_date': str(timezone.localdate() + timedelta(days=3)),
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['current_quantity'] == '8.0000'
        assert response.data['days_to_expiration'] == 3
        movement = StockMovement.objects.get(lot_id=response.data['id'])
        assert movement.description == 'Entrada inicial de lote'

    def test_duplicate_lot_code(self, auth_client, material):
        payload = {'material': material.pk, 'code': 'L-1', 'quantity': '1'}
        auth_client.post(reverse('api-lot-list'), payload, format='json')

        response = auth_client.post(reverse('api-lot-list'), payload, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['error'] == 'duplicate_code'

    def test_expiring_and_archive(self, auth_client, material):
        lot_id = auth_client.post(reverse('api-lot-list'), {
            'material': material.pk, 'code': 'L-1', 'quantity': '2',
            'expiration_date': str(timezone.localdate() + timedelta(days=2)),
        }, format='json').data['id']

        response = auth_client.get(reverse('api-lot-expiring'), {'days': 7})
        assert [lot['id'] for lot in response.data] == [lot_id]

        response = auth_client.delete(reverse('api-lot-detail', args=[lot_id]))
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['error'] == 'has_open_lots'

    def test_update_lot_keeps_quantities(self, auth_client, material):
        lot_id = auth_client.post(reverse('api-lot-list'), {
            'material': material.pk, 'code': 'L-1', 'quantity': '2'
        }, format='json').data['id']

        response = auth_client.patch(reverse('api-lot-detail', args=[lot_id]), {
            'code': 'L-1A', 'current_quantity': '99'
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        lot = Lot.objects.get(pk=lot_id)
        assert lot.code == 'L-1A'
        assert lot.current_quantity == Decimal('2')


@pytest.mark.django_db
class TestAlertsAPI:

    def test_list_read_and_summary(self, auth_client, material, receive, issue):
        receive(material, 10)
        issue(material, 7)

        response = auth_client.get(reverse('api-alert-list'), {'type': 'stock_bajo', 'read': 'false'})
        assert response.data['count'] == 1
        alert_id = response.data['results'][0]['id']

        response = auth_client.post(reverse('api-alert-read', args=[alert_id]))
        assert response.data['read'] is True

        response = auth_client.get(reverse('api-alert-summary'))
        assert response.data['by_type']['stock_bajo'] == {'total': 1, 'read': 1, 'unread': 0}

    def test_manual_alert_and_read_all(self, auth_client, user):
        response = auth_client.post(reverse('api-alert-list'), {
            'alert_type': 'vencimiento_proveedor',
            'message': 'Factura 2231 de Molinos del Norte vence el viernes',
            'recipient': user.pk,
        }, format='json')
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['recipient'] == user.pk

        response = auth_client.post(reverse('api-alert-read-all'), {}, format='json')
        assert response.data == {'updated': 1}


@pytest.mark.django_db
class TestCatalogAPI:

    def test_supplier_rfc_validation(self, auth_client):
        response = auth_client.post(reverse('api-supplier-list'), {
            'name': 'Molinos del Norte', 'tax_id': '12345'
        }, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'tax_id' in response.data

        response = auth_client.post(reverse('api-supplier-list'), {
            'name': 'Molinos del Norte', 'tax_id': 'mno010203ab1'
        }, format='json')
        assert response.status_code == status.HTTP_201_CREATED

    def test_supplier_rfc_with_separators(self, auth_client):
        response = auth_client.post(reverse('api-supplier-list'), {
            'name': 'Lácteos La Vega', 'tax_id': 'lav-010203-ab1 '
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['tax_id'] == 'LAV010203AB1'

        response = auth_client.post(reverse('api-supplier-list'), {
            'name': 'Azúcares del Sur', 'tax_id': 'ABCD-123456-XY9'
        }, format='json')
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['tax_id'] == 'ABCD123456XY9'

    def test_adjustment_type_in_use(self, auth_client, material, receive, issue):
        merma = AdjustmentTypeFactory(name='Merma')
        receive(material, 5)
        issue(material, 1, adjustment_type=merma)

        response = auth_client.delete(reverse('api-adjustment-type-detail', args=[merma.pk]))

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['error'] == 'has_movements'

    def test_adjustment_type_filters(self, auth_client):
        AdjustmentTypeFactory(name='Merma')
        AdjustmentTypeFactory(name='Corrección', requires_authorization=True)

        response = auth_client.get(reverse('api-adjustment-type-list'), {'requires_authorization': 'true'})
        assert [t['name'] for t in response.data['results']] == ['Corrección']
