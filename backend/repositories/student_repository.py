"""Student storage with whitelisted attribute search.

``search`` accepts a field name from the outside world. The name is only ever
used as a key into ``FIELD_WHITELIST``; the column that ends up in the query
is the mapped attribute stored there, and the value is always a bound
parameter.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from threading import Lock
from typing import Any, Callable, Mapping

from sqlalchemy import delete as sql_delete
from sqlalchemy import select
from sqlalchemy import update as sql_update
from sqlalchemy.engine import Engine
from sqlalchemy.orm import InstrumentedAttribute, Session

from backend.core.errors import InvalidValue, UnsupportedField
from backend.models.student import Student

logger = logging.getLogger(__name__)

_INTEGER_PATTERN = re.compile(r'[+-]?\d+')

# Signed 64-bit, the widest INTEGER the supported databases store.
MIN_INTEGER = -(2 ** 63)
MAX_INTEGER = 2 ** 63 - 1


class SearchField(str, Enum):
    ID = 'id'
    NAME = 'name'
    AGE = 'age'
    EMAIL = 'email'
    BIRTH_DATE = 'birth_date'


class MatchMode(str, Enum):
    EXACT = 'exact'
    SUBSTRING = 'substring'


class ValueType(str, Enum):
    INTEGER = 'integer'
    STRING = 'string'
    DATE = 'date'


@dataclass(frozen=True)
class FieldSpec:
    column: InstrumentedAttribute
    mode: MatchMode
    value_type: ValueType


FIELD_WHITELIST: dict[SearchField, FieldSpec] = {
    SearchField.ID: FieldSpec(Student.id, MatchMode.EXACT, ValueType.INTEGER),
    SearchField.NAME: FieldSpec(Student.name, MatchMode.SUBSTRING, ValueType.STRING),
    SearchField.AGE: FieldSpec(Student.age, MatchMode.EXACT, ValueType.INTEGER),
    SearchField.EMAIL: FieldSpec(Student.email, MatchMode.SUBSTRING, ValueType.STRING),
    SearchField.BIRTH_DATE: FieldSpec(Student.birth_date, MatchMode.EXACT, ValueType.DATE),
}

FIELD_ALIASES: dict[str, SearchField] = {
    'id': SearchField.ID,
    'name': SearchField.NAME,
    'age': SearchField.AGE,
    'email': SearchField.EMAIL,
    'birth_date': SearchField.BIRTH_DATE,
    'birthdate': SearchField.BIRTH_DATE,
}


def resolve_field(field_name: object) -> SearchField:
    if not isinstance(field_name, str):
        raise UnsupportedField(field_name)

    field = FIELD_ALIASES.get(field_name.strip().casefold())
    if field is None:
        raise UnsupportedField(field_name)
    return field


def coerce_value(field: SearchField, value: Any) -> Any:
    value_type = FIELD_WHITELIST[field].value_type

    if value_type is ValueType.INTEGER:
        if isinstance(value, bool):
            raise InvalidValue(field.value, value)
        if isinstance(value, int):
            number = value
        elif isinstance(value, str) and _INTEGER_PATTERN.fullmatch(value.strip()):
            number = int(value.strip())
        else:
            raise InvalidValue(field.value, value)
        if not MIN_INTEGER <= number <= MAX_INTEGER:
            raise InvalidValue(field.value, value)
        return number

    if value_type is ValueType.DATE:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                return date.fromisoformat(value.strip())
            except ValueError as exc:
                raise InvalidValue(field.value, value) from exc
        raise InvalidValue(field.value, value)

    if value is None:
        raise InvalidValue(field.value, value)
    return str(value)


class StudentRepository:
    def __init__(self, session_factory: Callable[[], Session], engine: Engine):
        self._session_factory = session_factory
        self._engine = engine
        self._schema_lock = Lock()
        self._schema_checked = False

    def ensure_schema(self) -> None:
        if self._schema_checked:
            return

        with self._schema_lock:
            if self._schema_checked:
                return
            Student.__table__.create(bind=self._engine, checkfirst=True)
            self._schema_checked = True

    def insert(self, name: str, age: int, email: str, birth_date: date) -> int:
        with self._session_factory() as db:
            student = Student(name=name, age=age, email=email, birth_date=birth_date)
            db.add(student)
            db.commit()
            return student.id

    def list(self) -> list[Student]:
        with self._session_factory() as db:
            return list(db.scalars(select(Student).order_by(Student.id.asc())).all())

    def get(self, student_id: int) -> Student | None:
        matches = self.search(SearchField.ID.value, student_id)
        return matches[0] if matches else None

    def update(self, student_id: int, name: str, age: int, email: str, birth_date: date) -> int:
        statement = (
            sql_update(Student)
            .where(Student.id == student_id)
            .values(name=name, age=age, email=email, birth_date=birth_date)
        )
        with self._session_factory() as db:
            result = db.execute(statement)
            db.commit()
            return result.rowcount

    def delete(self, student_id: int) -> int:
        with self._session_factory() as db:
            result = db.execute(sql_delete(Student).where(Student.id == student_id))
            db.commit()
            return result.rowcount

    def search(self, field_name: object, value: Any) -> list[Student]:
        field = resolve_field(field_name)
        spec = FIELD_WHITELIST[field]
        coerced = coerce_value(field, value)

        if spec.mode is MatchMode.SUBSTRING:
            criterion = spec.column.icontains(coerced, autoescape=True)
        else:
            criterion = spec.column == coerced

        statement = select(Student).where(criterion).order_by(Student.id.asc())
        with self._session_factory() as db:
            return list(db.scalars(statement).all())

    def search_many(self, filters: Mapping[str, Any]) -> list[Student]:
        """Union of per-field matches, de-duplicated and ordered by id.

        With no filters this is the full listing.
        """
        active = {name: value for name, value in filters.items() if value is not None}
        if not active:
            return self.list()

        # Resolve and coerce everything first so a bad filter issues no query at all.
        for name, value in active.items():
            coerce_value(resolve_field(name), value)

        by_id: dict[int, Student] = {}
        for name, value in active.items():
            for student in self.search(name, value):
                by_id.setdefault(student.id, student)
        return [by_id[student_id] for student_id in sorted(by_id)]
