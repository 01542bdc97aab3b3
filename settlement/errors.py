class SettlementServiceError(Exception):
    pass


class StoreUnavailableError(SettlementServiceError):
    """A collaborator store could not be read or written."""


class PayoutNotFoundError(SettlementServiceError):
    pass


class InvalidStateTransitionError(SettlementServiceError):
    pass
