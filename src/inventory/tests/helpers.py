"""In-memory and fault-injecting stores for service tests."""

import copy
import itertools
from decimal import Decimal

from inventory.exceptions import StoreConflict, StoreUnavailable

UNIQUE_COLUMNS = {
    "inventory_items": ("property_number",),
    "custodian_slips": ("slip_number",),
    "property_cards": ("inventory_item_id",),
}

DEFAULTS = {
    "inventory_items": {
        "description": "",
        "brand": "",
        "model_name": "",
        "serial_number": "",
        "unit_of_measure": "unit",
        "quantity": 1,
        "unit_cost": Decimal("0"),
        "total_cost": Decimal("0"),
        "category": "Semi-Expendable",
        "sub_category": "",
        "condition": "serviceable",
        "status": "active",
        "assignment_status": "available",
        "custodian": None,
        "custodian_position": None,
        "assigned_date": None,
        "ics_number": None,
        "date_acquired": None,
        "estimated_useful_life": "",
        "remarks": "",
    },
}

STORE_METHODS = ("select", "get", "insert", "update", "delete", "delete_where")


def _matches(row, filters):
    for field, value in (filters or {}).items():
        if field == "pk":
            field = "id"
        if row.get(field) != value:
            return False
    return True


def _like(value, pattern):
    if value is None:
        return False
    core = pattern.strip("%")
    if pattern.startswith("%") and pattern.endswith("%"):
        return core in value
    if pattern.endswith("%"):
        return value.startswith(core)
    if pattern.startswith("%"):
        return value.endswith(core)
    return value == core


class MemoryStore:
    """Dict-backed store with the same contract as DjangoStore.

    Numbering columns are unique and a duplicate insert raises
    StoreConflict, like the database constraints do.
    """

    def __init__(self):
        self.tables = {}
        self._ids = itertools.count(1)

    def rows(self, table):
        return self.tables.setdefault(table, [])

    def select(
        self, table, filters=None, *, like=None, order_by=None, limit=None
    ):
        rows = [r for r in self.rows(table) if _matches(r, filters)]
        for field, pattern in (like or {}).items():
            rows = [r for r in rows if _like(r.get(field), pattern)]
        for key in reversed(order_by or []):
            field = key.lstrip("-")
            rows.sort(key=lambda r: r[field], reverse=key.startswith("-"))
        if limit:
            rows = rows[:limit]
        return copy.deepcopy(rows)

    def get(self, table, pk):
        rows = self.select(table, {"id": pk}, limit=1)
        return rows[0] if rows else None

    def insert(self, table, values):
        row = {**DEFAULTS.get(table, {}), **values}
        for column in UNIQUE_COLUMNS.get(table, ()):
            if any(r.get(column) == row.get(column) for r in self.rows(table)):
                raise StoreConflict(
                    f"{table}: duplicate {column} {row.get(column)!r}"
                )
        row["id"] = next(self._ids)
        self.rows(table).append(row)
        return copy.deepcopy(row)

    def update(self, table, pk, values):
        for row in self.rows(table):
            if row["id"] == pk:
                row.update(values)
                return copy.deepcopy(row)
        raise StoreUnavailable(f"{table}: row {pk} no longer exists.")

    def delete(self, table, pk):
        return self.delete_where(table, {"id": pk})

    def delete_where(self, table, filters):
        rows = self.rows(table)
        keep = [r for r in rows if not _matches(r, filters)]
        deleted = len(rows) - len(keep)
        self.tables[table] = keep
        return deleted

    def snapshot(self):
        return copy.deepcopy(self.tables)


class FailingStore:
    """Wraps a store and raises on a chosen call.

    The call is matched by method name and table; the first ``after``
    matching calls go through, the next one raises ``error``. With
    ``once=False`` every later matching call raises as well.
    """

    def __init__(self, inner, method, table, after=0, error=None, once=True):
        self.inner = inner
        self.method = method
        self.table = table
        self.after = after
        self.error = error or StoreUnavailable(
            f"Injected failure on {method} {table}"
        )
        self.once = once
        self.calls = 0
        self.raised = 0

    def _check(self, method, table):
        if method != self.method or table != self.table:
            return
        self.calls += 1
        if self.calls <= self.after:
            return
        if self.once and self.raised:
            return
        self.raised += 1
        raise self.error

    def __getattr__(self, name):
        attr = getattr(self.inner, name)
        if name not in STORE_METHODS:
            return attr

        def call(table, *args, **kwargs):
            self._check(name, table)
            return attr(table, *args, **kwargs)

        return call


class RacingStore:
    """Wraps a store and lets a competing writer take a number first.

    Before each insert into ``table``, ``competitor(inner, values)`` runs
    against the wrapped store, as if another caller had committed in the
    window between minting a number and inserting it.
    """

    def __init__(self, inner, table, competitor, times=1):
        self.inner = inner
        self.table = table
        self.competitor = competitor
        self.times = times

    def insert(self, table, values):
        if table == self.table and self.times > 0:
            self.times -= 1
            self.competitor(self.inner, values)
        return self.inner.insert(table, values)

    def __getattr__(self, name):
        return getattr(self.inner, name)
