from decimal import Decimal

import pytest

from apps.core.exceptions import InventoryValidationError
from apps.core.utils import format_quantity, to_decimal, to_positive_decimal


class TestFormatQuantity:

    def test_trailing_zeros_are_dropped(self):
        assert format_quantity(Decimal('2000.0000')) == '2000'
        assert format_quantity(Decimal('0.2500')) == '0.25'

    def test_plain_numbers_are_accepted(self):
        """Unsaved instances still carry plain field defaults"""
        assert format_quantity(0) == '0'
        assert format_quantity(15) == '15'


class TestDecimalCoercion:

    def test_strings_and_floats(self):
        assert to_decimal('2.5') == Decimal('2.5')
        assert to_decimal(0.1) == Decimal('0.1')

    @pytest.mark.parametrize('value', [None, True, 'diez', 'NaN', 'Infinity'])
    def test_rejected(self, value):
        with pytest.raises(InventoryValidationError):
            to_decimal(value)

    def test_positive(self):
        with pytest.raises(InventoryValidationError, match='mayor que cero'):
            to_positive_decimal('0')
