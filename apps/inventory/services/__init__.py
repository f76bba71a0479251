from .adjustments import AdjustmentTypeService
from .ledger import EntryCommand, ExitCommand, LedgerService, LotSpec

__all__ = [
    'AdjustmentTypeService',
    'EntryCommand',
    'ExitCommand',
    'LedgerService',
    'LotSpec',
]
