from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from funcbridge.config import AppConfig
from funcbridge.db import AuditStore
from funcbridge.gateway import CallResult, FunctionGateway
from funcbridge.registry import FunctionDescriptor, FunctionRegistry, Param
from funcbridge.vfs import VirtualEnvironment

logger = logging.getLogger(__name__)

ParamLike = Union[str, Param]


def _params(params: Optional[Sequence[ParamLike]]) -> Optional[List[Param]]:
    if params is None:
        return None
    return [p if isinstance(p, Param) else Param(name=p) for p in params]


class App:
    """
    One registry, one sandbox, one gateway.

    Front ends (CLI, HTTP handlers, stdio loops) hold an App and call
    `call(name, args)`; everything they need to describe a function comes
    from `registry`.
    """

    def __init__(self, config: Optional[AppConfig] = None, audit: Optional[AuditStore] = None):
        self.config = config or AppConfig()
        self.env = VirtualEnvironment(
            env_vars=self.config.env,
            mounts=self.config.mounts,
            strict_mounts=self.config.strict_mounts,
        )
        self.registry = FunctionRegistry()
        if audit is None and self.config.database_url:
            audit = AuditStore(self.config.database_url)
        self.gateway = FunctionGateway(self.registry, self.env, audit=audit, source=self.config.name)

    def register(
        self,
        fn: Callable,
        name: Optional[str] = None,
        description: str = "",
        params: Optional[Sequence[ParamLike]] = None,
        returns: Optional[Sequence[str]] = None,
    ) -> FunctionDescriptor:
        return self.registry.register(fn, name=name, description=description, params=_params(params), returns=returns)

    def function(
        self,
        name: Optional[str] = None,
        description: str = "",
        params: Optional[Sequence[ParamLike]] = None,
        returns: Optional[Sequence[str]] = None,
    ) -> Callable[[Callable], Callable]:
        """Decorator form of `register`; the function is returned unchanged."""
        def decorator(fn: Callable) -> Callable:
            self.register(fn, name=name, description=description, params=params, returns=returns)
            return fn
        return decorator

    def discover(self, tools_root: Optional[Path] = None) -> List[str]:
        root = tools_root or self.config.tools_root
        if root is None:
            logger.debug("no tools_root configured, nothing to discover")
            return []
        return self.registry.discover(Path(root))

    def call(self, name: str, args: Optional[Dict[str, Any]] = None, channel: str = "local", **kwargs: Any) -> CallResult:
        return self.gateway.run_function(name, args or {}, channel=channel, **kwargs)

    def run(self, argv: Optional[Sequence[str]] = None) -> int:
        """Run the command line front end against this app."""
        from funcbridge import cli

        return cli.main(argv, app=self)
