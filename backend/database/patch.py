"""
Owner-scoped partial updates.

Turns a caller supplied ``{column: value}`` mapping into a single UPDATE
restricted to one row of one owner. Column names are checked against an
allow-list and always resolved through the table metadata; values are
always bound parameters.
"""
from typing import Any, Collection, Iterable, Mapping

from sqlalchemy import Table, and_, update
from sqlalchemy.sql.dml import Update


class PatchError(ValueError):
    pass


class DisallowedField(PatchError):
    def __init__(self, fields: Iterable[str]):
        self.fields = sorted(fields)
        super().__init__(f"Field(s) not allowed: {', '.join(self.fields)}")


class EmptyPatch(PatchError):
    def __init__(self):
        super().__init__("No fields to update")


def check_fields(changes: Mapping[str, Any], allowed: Collection[str]) -> None:
    """Raise DisallowedField if any key of ``changes`` is outside ``allowed``."""
    rejected = [field for field in changes if field not in allowed]
    if rejected:
        raise DisallowedField(rejected)


def build_patch(
    table: Table,
    changes: Mapping[str, Any],
    allowed: Collection[str],
    key_column: str,
    entity_id: Any,
    owner_column: str,
    owner_id: Any,
) -> Update:
    """
    Build ``UPDATE <table> SET c1=?, c2=? ... WHERE key=? AND owner=?``.

    SET parameters come first, in the order of ``changes``; the row key and
    the owner key are the last two parameters.
    """
    if not changes:
        raise EmptyPatch()
    check_fields(changes, allowed)

    # table.c lookup keeps arbitrary strings out of the statement text
    values = {table.c[field]: value for field, value in changes.items()}

    return (
        update(table)
        .where(
            and_(
                table.c[key_column] == entity_id,
                table.c[owner_column] == owner_id,
            )
        )
        .values(values)
    )
