# dbmanager/queries.py
from sqlalchemy import and_, column, insert, literal_column, select, table
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from .errors import QueryConstructionError
from .values import RelationValues, is_expression, to_clause


# Dialects that know how to render "ON CONFLICT DO NOTHING"
CONFLICT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def _relation_table(relation: str, values: RelationValues):
    if not isinstance(relation, str) or not relation.strip():
        raise QueryConstructionError(f"invalid relation name {relation!r}", relation)

    for field in values:
        if not isinstance(field, str) or not field.strip():
            raise QueryConstructionError(
                f"invalid field name {field!r} for relation '{relation}'", relation
            )

    return table(relation, *[column(field) for field in values])


def existence_query(relation: str, values: RelationValues):
    """
    SELECT 1 FROM <relation> WHERE <field> = <value> AND ... LIMIT 1

    Fields holding SQL expressions are left out of the filter.
    """
    tbl = _relation_table(relation, values)

    conditions = [
        tbl.c[field] == value
        for field, value in values.items()
        if not is_expression(value)
    ]

    query = select(literal_column("1")).select_from(tbl)
    if conditions:
        query = query.where(and_(*conditions))
    return query.limit(1)


def insert_query(relation: str, values: RelationValues, ignore_conflict: bool = False, dialect: str = None):
    tbl = _relation_table(relation, values)
    if not values:
        raise QueryConstructionError(f"no values to insert into '{relation}'", relation)

    row = {field: to_clause(value) for field, value in values.items()}

    if not ignore_conflict:
        return insert(tbl).values(row)

    dialect_insert = CONFLICT_INSERTS.get(dialect)
    if dialect_insert is None:
        raise QueryConstructionError(
            f"dialect '{dialect}' does not support ON CONFLICT DO NOTHING", relation
        )
    return dialect_insert(tbl).values(row).on_conflict_do_nothing()
