"""Row-level store access for the custody workflow.

The workflow services only ever see rows as plain dicts keyed by column
(attribute) name, and only use single-statement operations: select,
get, insert, update, delete. Anything that needs more than one
statement to stay consistent is the caller's job (see
``compensation.CompensationLog``).
"""

from contextlib import contextmanager

from django.db import DatabaseError, IntegrityError, transaction

from ..exceptions import StoreConflict, StoreUnavailable


def _tables():
    from ..models import (
        CustodianSlip,
        CustodianSlipItem,
        InventoryItem,
        PropertyCard,
        PropertyCardEntry,
        Transfer,
        TransferItem,
    )

    return {
        "inventory_items": InventoryItem,
        "property_cards": PropertyCard,
        "property_card_entries": PropertyCardEntry,
        "custodian_slips": CustodianSlip,
        "custodian_slip_items": CustodianSlipItem,
        "transfers": Transfer,
        "transfer_items": TransferItem,
    }


def like_lookup(field: str, pattern: str) -> dict:
    """Translate a SQL LIKE pattern using ``%`` into an ORM lookup."""
    starts = pattern.startswith("%")
    ends = pattern.endswith("%")
    core = pattern.strip("%")
    if starts and ends:
        return {f"{field}__contains": core}
    if ends:
        return {f"{field}__startswith": core}
    if starts:
        return {f"{field}__endswith": core}
    return {field: core}


@contextmanager
def translate_errors(table):
    try:
        yield
    except IntegrityError as e:
        raise StoreConflict(f"{table}: {e}") from e
    except DatabaseError as e:
        raise StoreUnavailable(f"{table}: {e}") from e


def row_from_instance(obj) -> dict:
    return {f.attname: getattr(obj, f.attname) for f in obj._meta.concrete_fields}


class DjangoStore:
    """Store backed by the Django ORM.

    Each call runs as its own statement (wrapped in a savepoint when an
    outer transaction is active) so a failed write never poisons the
    connection for the compensating writes that follow it.
    """

    def __init__(self):
        self._models = None

    def model_for(self, table):
        if self._models is None:
            self._models = _tables()
        try:
            return self._models[table]
        except KeyError:
            raise StoreUnavailable(f"Unknown table '{table}'.") from None

    def select(
        self, table, filters=None, *, like=None, order_by=None, limit=None
    ) -> list[dict]:
        model = self.model_for(table)
        with translate_errors(table):
            qs = model.objects.filter(**(filters or {}))
            for field, pattern in (like or {}).items():
                qs = qs.filter(**like_lookup(field, pattern))
            if order_by:
                qs = qs.order_by(*order_by)
            rows = qs.values()
            if limit:
                rows = rows[:limit]
            return list(rows)

    def get(self, table, pk) -> dict | None:
        rows = self.select(table, {"pk": pk}, limit=1)
        return rows[0] if rows else None

    def insert(self, table, values) -> dict:
        model = self.model_for(table)
        with translate_errors(table), transaction.atomic():
            obj = model(**values)
            obj.save()
        return row_from_instance(obj)

    def update(self, table, pk, values) -> dict:
        model = self.model_for(table)
        names = {f.attname: f.name for f in model._meta.concrete_fields}
        with translate_errors(table), transaction.atomic():
            try:
                obj = model.objects.get(pk=pk)
            except model.DoesNotExist:
                raise StoreUnavailable(
                    f"{table}: row {pk} no longer exists."
                ) from None
            for field, value in values.items():
                setattr(obj, field, value)
            update_fields = [names.get(field, field) for field in values]
            if "updated_at" in names and "updated_at" not in update_fields:
                update_fields.append("updated_at")
            obj.save(update_fields=update_fields)
        return row_from_instance(obj)

    def delete(self, table, pk) -> int:
        return self.delete_where(table, {"pk": pk})

    def delete_where(self, table, filters) -> int:
        model = self.model_for(table)
        with translate_errors(table), transaction.atomic():
            deleted, _ = model.objects.filter(**filters).delete()
        return deleted


_default_store = None


def get_default_store() -> DjangoStore:
    global _default_store
    if _default_store is None:
        _default_store = DjangoStore()
    return _default_store
