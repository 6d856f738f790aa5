from __future__ import annotations

import importlib
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from funcbridge.errors import RegistryError

from .analyzer import analyze, parameter_names
from .schema import request_schema, response_schema
from .types import FunctionDescriptor, FunctionSpec, Param

logger = logging.getLogger(__name__)


def _import_handler(handler: str) -> Callable:
    """
    handler format: "module.path:callable_name"
    example: "tools.calculator.tool:add"
    """
    if ":" not in handler:
        raise RegistryError.because(f"Invalid handler '{handler}'. Expected 'module:callable'.", handler=handler)
    module_path, fn_name = handler.split(":", 1)
    try:
        mod = importlib.import_module(module_path)
    except ImportError as e:
        raise RegistryError.because(f"Cannot import handler module '{module_path}': {e}", handler=handler) from e
    fn = getattr(mod, fn_name, None)
    if fn is None or not callable(fn):
        raise RegistryError.because(f"Handler '{handler}' not found.", handler=handler)
    return fn


def _load_json(p: Path) -> Dict[str, Any]:
    with p.open("r", encoding="utf-8") as f:
        return json.load(f)


def _params(raw: Any, manifest_path: Path) -> tuple:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise RegistryError.because(f"'params' must be a list in {manifest_path}", manifest=str(manifest_path))
    out = []
    for p in raw:
        if isinstance(p, str):
            out.append(Param(name=p))
        elif isinstance(p, dict) and p.get("name"):
            out.append(Param(name=p["name"], description=p.get("description", "")))
        else:
            raise RegistryError.because(f"Invalid param entry {p!r} in {manifest_path}", manifest=str(manifest_path))
    return tuple(out)


class FunctionRegistry:
    """
    Holds FunctionDescriptors by name.

    Functions come from code (`register`) or from tools/*/manifest.json
    (`discover`). Every registration runs the signature analyzer once; a bad
    signature or a duplicate name raises and should stop startup.
    """
    def __init__(self) -> None:
        self._functions: Dict[str, FunctionDescriptor] = {}

    def register(
        self,
        fn: Callable,
        name: Optional[str] = None,
        description: str = "",
        params: Optional[Sequence[Param]] = None,
        returns: Optional[Sequence[str]] = None,
        source: str = "code",
    ) -> FunctionDescriptor:
        descriptor = analyze(fn, name=name, description=description)
        if params:
            names = [p.name for p in params]
            descs = [p.description for p in params]
        else:
            names, descs = parameter_names(fn), []
        try:
            descriptor = descriptor.with_param_names(names, descs)
        except ValueError as e:
            raise RegistryError.because(str(e), function=descriptor.name) from e
        if returns:
            descriptor = descriptor.with_return_descriptions(list(returns))

        if descriptor.name in self._functions:
            raise RegistryError.because(f"Duplicate function name '{descriptor.name}' from {source}", function=descriptor.name)

        descriptor = replace(descriptor, source=source)
        self._functions[descriptor.name] = descriptor
        logger.debug("registered %s (%s)", descriptor.name, source)
        return descriptor

    def discover(self, tools_root: Path) -> List[str]:
        """Register every function listed in tools_root/*/manifest.json. Returns the new names."""
        if not tools_root.exists():
            raise RegistryError.because(f"Tools root does not exist: {tools_root}", tools_root=str(tools_root))

        # handlers are dotted from the directory holding tools_root ("tools.calculator.tool:add")
        import_root = str(tools_root.resolve().parent)
        if import_root not in sys.path:
            sys.path.insert(0, import_root)
            importlib.invalidate_caches()

        added: List[str] = []
        for manifest_path in sorted(tools_root.glob("*/manifest.json")):
            for spec in self._specs_from_manifest(manifest_path):
                fn = _import_handler(spec.handler)
                self.register(
                    fn,
                    name=spec.name,
                    description=spec.description,
                    params=spec.params or None,
                    returns=spec.returns or None,
                    source=str(manifest_path),
                )
                added.append(spec.name)
        logger.info("discovered %d function(s) under %s", len(added), tools_root)
        return added

    def _specs_from_manifest(self, manifest_path: Path) -> List[FunctionSpec]:
        try:
            manifest = _load_json(manifest_path)
        except json.JSONDecodeError as e:
            raise RegistryError.because(f"Invalid JSON in {manifest_path}: {e}", manifest=str(manifest_path)) from e

        # Validate top-level manifest structure
        pkg = manifest.get("package")
        functions = manifest.get("functions", [])
        if not pkg or not isinstance(functions, list) or not functions:
            raise RegistryError.because(f"Invalid manifest format: {manifest_path}", manifest=str(manifest_path))

        specs = []
        for f in functions:
            if not isinstance(f, dict) or "name" not in f or "handler" not in f:
                raise RegistryError.because(f"Function entry needs 'name' and 'handler' in {manifest_path}", manifest=str(manifest_path))
            specs.append(
                FunctionSpec(
                    name=f["name"],
                    handler=f["handler"],
                    description=f.get("description", ""),
                    params=_params(f.get("params"), manifest_path),
                    returns=tuple(f.get("returns", ())),
                    manifest_path=manifest_path,
                )
            )
        return specs

    def get(self, name: str) -> FunctionDescriptor:
        if name not in self._functions:
            raise RegistryError.because(f"function not found: {name}", function=name)
        return self._functions[name]

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def list(self) -> Dict[str, FunctionDescriptor]:
        return dict(self._functions)

    def get_request_schema(self, name: str) -> Dict[str, Any]:
        return request_schema(self.get(name))

    def get_response_schema(self, name: str) -> Optional[Dict[str, Any]]:
        return response_schema(self.get(name))
