from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping, Optional


@dataclass
class ProgramEnrollment:
    patient_id: Optional[int] = None
    program: Optional[str] = None
    date_enrolled: Optional[date] = None
    date_completed: Optional[date] = None


def format_ddmmyyyy(d: date) -> str:
    # strftime("%Y") is not zero-padded for years < 1000 on every platform
    return f"{d.day:02d}/{d.month:02d}/{d.year:04d}"


class DateFieldFormatter:
    """Renders one optional date field of a record as DD/MM/YYYY.

    Returns "" when the record is absent or the field is unset. The date's
    own calendar fields are used; datetimes are not converted between zones.
    """

    input_data_type: type = object
    data_type: type = str

    def __init__(self, field: str):
        self.field = field

    def _value(self, record: Any) -> Any:
        if isinstance(record, Mapping):
            return record.get(self.field)
        return getattr(record, self.field, None)

    def format(self, record: Any) -> str:
        if record is None:
            return ""
        value = self._value(record)
        if value is None:
            return ""
        if not isinstance(value, date):
            raise TypeError(f"{self.field} must be a date, got {type(value).__name__}")
        return format_ddmmyyyy(value)

    def convert(self, original: Any) -> str:
        return self.format(original)


class EnrollmentDateConverter(DateFieldFormatter):
    input_data_type = ProgramEnrollment

    def __init__(self) -> None:
        super().__init__("date_enrolled")
