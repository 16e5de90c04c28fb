class FinanceError(ValueError):
    """Base class for ledger errors; a ValueError so callers can treat it as bad input."""


class ConstraintError(FinanceError):
    pass


class NotFoundError(FinanceError):
    pass


class ConflictError(FinanceError):
    pass


class IntegrityError(FinanceError):
    """Seed data is missing, e.g. no category exists for a transaction kind."""


class NoOpError(FinanceError):
    pass


class MigrationError(RuntimeError):
    pass
