"""Domain layer for passbook application.

Services are imported lazily so that ``passbook.database`` can import the
entity modules without pulling the services (and with them the database
layer) back in.
"""

_SERVICES = {
    "AccountService": "passbook.domain.account",
    "RecipientService": "passbook.domain.recipient",
    "TransactionService": "passbook.domain.transaction",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
