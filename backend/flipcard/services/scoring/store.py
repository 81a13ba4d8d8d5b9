from typing import Any, List

from sqlalchemy.exc import IntegrityError

from flipcard import db
from flipcard.models import ContactRecord, TimeRecord
from flipcard.services.errors import DuplicateRecordError, InputError

TIME_SHEET = 'Time'
DETAILS_SHEET = 'PlayerDetails'

# sheet name -> (model, column attributes in spreadsheet order)
_SHEETS = {
    TIME_SHEET: (TimeRecord, ('seconds',)),
    DETAILS_SHEET: (ContactRecord, ('name', 'email')),
}


class SheetStore:
    """Append-only store addressed like a spreadsheet: sheets and columns.

    Only two operations exist, ``append_value`` and ``read_column``; rows are
    never updated or deleted. Column numbers are 1-based.
    """

    def __init__(self, session=None):
        self.session = session or db.session

    def _sheet(self, sheet_name: str):
        try:
            return _SHEETS[sheet_name]
        except KeyError:
            raise InputError(f'{sheet_name} sheet not found.') from None

    def append_value(self, sheet_name: str, value: Any):
        model, columns = self._sheet(sheet_name)
        row = tuple(value) if isinstance(value, (list, tuple)) else (value,)
        if len(row) != len(columns):
            raise InputError(f'{sheet_name} expects {len(columns)} column(s), got {len(row)}.')
        record = model(**dict(zip(columns, row)))
        self.session.add(record)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise DuplicateRecordError(f'{sheet_name} already contains {row!r}') from exc
        return record

    def read_column(self, sheet_name: str, column_index: int) -> List[Any]:
        model, columns = self._sheet(sheet_name)
        if not 1 <= column_index <= len(columns):
            raise InputError(f'{sheet_name} has no column {column_index}.')
        column = getattr(model, columns[column_index - 1])
        rows = self.session.query(column).order_by(model.id).all()
        return [r[0] for r in rows]
