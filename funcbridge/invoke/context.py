from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field

from funcbridge.vfs.environment import VirtualEnvironment


@dataclass(frozen=True)
class CallContext:
    """
    Capability token passed as the first argument of every registered function.

    `env` is the sandbox handle. `cancelled` is advisory: the invoker never
    checks it, a long-running function may poll it.
    """
    env: VirtualEnvironment
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    channel: str = "local"                 # cli | http | stdio | local ...
    cancelled: threading.Event = field(default_factory=threading.Event, compare=False, repr=False)
