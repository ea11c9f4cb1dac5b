# dbmanager/manager.py
import logging
from types import MappingProxyType
from typing import Callable, Mapping, NoReturn

from sqlalchemy.engine import Engine
from sqlalchemy.exc import ArgumentError, CompileError, SQLAlchemyError

from .errors import (
    ConfigurationError,
    ExecutionError,
    FixtureError,
    QueryConstructionError,
    RollbackError,
    TransactionStartError,
)
from .queries import existence_query, insert_query
from .values import RelationValues, RelationValuesOption, apply_options, copy_values

logger = logging.getLogger(__name__)


class DBManager:
    """
    Makes sure a relation holds the record a test expects.

    - `engine`: database the records are written to.
    - `fatal`: called with a message when setup fails, must not return
      (pytest.fail in tests).
    - `default_values`: relation name -> default field values. Copied once
      here and never handed out without copying again.
    """

    def __init__(
        self,
        engine: Engine,
        fatal: Callable[[str], NoReturn],
        default_values: Mapping[str, RelationValues],
    ):
        self.engine = engine
        self.fatal = fatal
        self._default_values = MappingProxyType(
            {relation: copy_values(values) for relation, values in default_values.items()}
        )

    @property
    def default_values(self) -> Mapping[str, RelationValues]:
        return self._default_values

    def relation_values(self, relation: str, *opts: RelationValuesOption) -> RelationValues:
        """Copy of the relation's defaults with every option applied in order."""
        defaults = self._default_values.get(relation)
        if defaults is None:
            raise ConfigurationError(f"no default values for relation '{relation}'", relation)

        return apply_options(copy_values(defaults), *opts)

    # -----------------------------------------
    # Public operations
    # -----------------------------------------
    def resolve_record(self, relation: str, *opts: RelationValuesOption) -> None:
        """
        Look the record up inside a transaction and insert it only when it is
        missing. A row sharing a unique key but holding other values makes the
        insert fail, which is reported as fatal.
        """
        try:
            values = self.relation_values(relation, *opts)
            self._resolve(relation, values)
        except FixtureError as exc:
            self._abort(exc)

    def create_record(self, relation: str, *opts: RelationValuesOption) -> None:
        """
        Insert the record with ON CONFLICT DO NOTHING, skipping the lookup.
        An existing row with the same unique key is accepted whatever its
        other values are.
        """
        try:
            values = self.relation_values(relation, *opts)
            query = self._build(insert_query, relation, values, True, self.engine.dialect.name)
            try:
                with self.engine.begin() as conn:
                    conn.execute(query)
            except CompileError as exc:
                raise QueryConstructionError(f"could not compile insert: {exc}", relation) from exc
            except SQLAlchemyError as exc:
                raise ExecutionError(f"insert failed: {exc}", relation) from exc
        except FixtureError as exc:
            self._abort(exc)

        logger.debug(f"Created (or kept existing) test record in '{relation}'")

    # -----------------------------------------
    # Internals
    # -----------------------------------------
    def _resolve(self, relation: str, values: RelationValues) -> None:
        try:
            conn = self.engine.connect()
        except SQLAlchemyError as exc:
            raise TransactionStartError(f"could not connect: {exc}", relation) from exc

        with conn:
            try:
                trans = conn.begin()
            except SQLAlchemyError as exc:
                raise TransactionStartError(f"could not begin transaction: {exc}", relation) from exc

            try:
                if self._exists(conn, relation, values):
                    logger.debug(f"Test record already present in '{relation}'")
                else:
                    self._insert(conn, relation, values)
                    logger.debug(f"Created test record in '{relation}'")

                try:
                    trans.commit()
                except SQLAlchemyError as exc:
                    raise ExecutionError(f"commit failed: {exc}", relation) from exc
            except FixtureError as exc:
                self._rollback(trans, relation, exc)
                raise

    def _exists(self, conn, relation: str, values: RelationValues) -> bool:
        query = self._build(existence_query, relation, values)
        try:
            return conn.execute(query).first() is not None
        except CompileError as exc:
            raise QueryConstructionError(f"could not compile existence check: {exc}", relation) from exc
        except SQLAlchemyError as exc:
            raise ExecutionError(f"existence check failed: {exc}", relation) from exc

    def _insert(self, conn, relation: str, values: RelationValues) -> None:
        query = self._build(insert_query, relation, values)
        try:
            conn.execute(query)
        except CompileError as exc:
            raise QueryConstructionError(f"could not compile insert: {exc}", relation) from exc
        except SQLAlchemyError as exc:
            raise ExecutionError(f"insert failed: {exc}", relation) from exc

    @staticmethod
    def _build(builder, relation: str, *args):
        try:
            return builder(relation, *args)
        except ArgumentError as exc:
            raise QueryConstructionError(str(exc), relation) from exc

    @staticmethod
    def _rollback(trans, relation: str, cause: FixtureError) -> None:
        try:
            trans.rollback()
        except SQLAlchemyError as exc:
            raise RollbackError(f"rollback failed after '{cause}': {exc}", relation) from exc

    def _abort(self, exc: FixtureError) -> NoReturn:
        if isinstance(exc, ConfigurationError):
            message = str(exc)
        else:
            message = f"Test setup failed: could not create test record for '{exc.relation}': {exc}"

        logger.error(message)
        self.fatal(message)
        # fatal handlers are expected to raise; never fall through to the test
        raise exc
