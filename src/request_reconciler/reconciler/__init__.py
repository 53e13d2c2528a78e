"""Reconciliation of declared HTTP resources.

Modules:

- ``observe``  -- ``ObservationEngine``: gate, fetch, desired state, compare.
- ``external`` -- ``RequestExternal``: observe/create/update/delete/reconcile.
- ``status``   -- ``StatusHandler``: write exchange outcomes to status.
- ``store``    -- ``ResourceStore`` protocol and ``JsonFileResourceStore``.

Usage example
-------------
::

    from pathlib import Path
    from request_reconciler.config import Config
    from request_reconciler.core.client import HttpClient
    from request_reconciler.reconciler import (
        JsonFileResourceStore,
        RequestExternal,
    )

    external = RequestExternal(
        client=HttpClient(Config()),
        store=JsonFileResourceStore(Path(".request_reconciler/state")),
    )
    result = external.reconcile(resource)
    print(result.outcome.value)
"""

from .external import (
    ExternalObservation,
    ReconcileOutcome,
    ReconcileResult,
    RequestExternal,
)
from .observe import (
    ObservationEngine,
    ObservationResult,
    is_valid_for_observation,
)
from .status import StatusHandler
from .store import JsonFileResourceStore, ResourceStore

__all__ = [
    "ExternalObservation",
    "JsonFileResourceStore",
    "ObservationEngine",
    "ObservationResult",
    "ReconcileOutcome",
    "ReconcileResult",
    "RequestExternal",
    "ResourceStore",
    "StatusHandler",
    "is_valid_for_observation",
]
