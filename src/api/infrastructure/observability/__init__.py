"""Probes for the shared database infrastructure.

Engines and branch pools report lifecycle events (pool created, evicted,
closed) through ConnectionProbe rather than logging directly. Bounded
contexts define their own probes next to the code they instrument; only the
observation context is shared.
"""

from infrastructure.observability.probes import (
    ConnectionProbe,
    DefaultConnectionProbe,
)
from shared_kernel.observability_context import ObservationContext

__all__ = [
    "ConnectionProbe",
    "DefaultConnectionProbe",
    "ObservationContext",
]
