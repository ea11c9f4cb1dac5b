# dbmanager/errors.py


class FixtureError(Exception):
    """Base error for everything that can go wrong while setting up a test record."""

    def __init__(self, message: str, relation: str = None):
        super().__init__(message)
        self.relation = relation


class ConfigurationError(FixtureError):
    """Relation has no entry in the default value table."""


class TransactionStartError(FixtureError):
    pass


class QueryConstructionError(FixtureError):
    pass


class ExecutionError(FixtureError):
    pass


class RollbackError(FixtureError):
    pass
