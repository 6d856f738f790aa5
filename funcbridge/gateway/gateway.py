from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError as JsonSchemaValidationError

from funcbridge.db import AuditStore
from funcbridge.db import repo as dbrepo
from funcbridge.errors import ErrorCode, FuncBridgeError
from funcbridge.invoke import CallContext, build_error_response, build_success_response, call
from funcbridge.registry import FunctionRegistry, response_schema
from funcbridge.vfs import VirtualEnvironment

logger = logging.getLogger(__name__)


@dataclass
class CallResult:
    status: str  # ok|error
    function_name: str
    request_id: str
    results: List[Any]
    error: Optional[Dict[str, Any]]
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    def envelope(self) -> Dict[str, Any]:
        """The transport-neutral {"result": ...} / {"error": ...} shape."""
        if self.ok:
            return build_success_response(self.results)
        return build_error_response((self.error or {}).get("message", ""))


class FunctionGateway:
    """
    Single choke point for calling registered functions.

    Responsibilities:
    - Look up the descriptor
    - Coerce arguments and invoke once (no retries, no timeout)
    - Validate the success envelope against the response schema (optional)
    - Return a CallResult; call-time failures never raise
    - Record the call in the audit store when one is configured
    """

    def __init__(
        self,
        registry: FunctionRegistry,
        env: VirtualEnvironment,
        audit: Optional[AuditStore] = None,
        source: str = "gateway",
    ):
        self.registry = registry
        self.env = env
        self.audit = audit
        self.source = source

    def run_function(
        self,
        function_name: str,
        args: Any,
        channel: str = "local",
        request_id: Optional[str] = None,
        validate_output: bool = False,
    ) -> CallResult:
        request_id = request_id or str(uuid.uuid4())
        t0 = time.time()
        call_run_id = None
        try:
            call_run_id = self._audit_start(request_id, function_name, channel, args)
        except Exception as e:
            logger.warning("audit start failed for %s (%s): %s", function_name, request_id, e)

        res = self._run(function_name, args, channel, request_id, validate_output, t0)

        try:
            self._audit_finish(call_run_id, res)
        except Exception as e:
            logger.warning("audit finish failed for %s (%s): %s", function_name, request_id, e)
        if res.ok:
            logger.info("%s ok in %dms (%s)", function_name, res.meta["latency_ms"], request_id)
        else:
            logger.warning("%s failed: %s %s (%s)", function_name, res.error["code"], res.error["message"], request_id)
        return res

    def _run(
        self,
        function_name: str,
        args: Any,
        channel: str,
        request_id: str,
        validate_output: bool,
        t0: float,
    ) -> CallResult:
        # ---- Lookup ----
        if function_name not in self.registry:
            return self._err(
                function_name, request_id, channel,
                code=ErrorCode.NOT_FOUND,
                message=f"function not found: {function_name}",
                details={"function": function_name},
                latency_ms=self._ms_since(t0),
            )
        descriptor = self.registry.get(function_name)

        if args is None:
            args = {}
        if not isinstance(args, Mapping):
            return self._err(
                function_name, request_id, channel,
                code=ErrorCode.INVALID_ARGUMENT,
                message="arguments must be an object of name -> value",
                details={"type": type(args).__name__},
                latency_ms=self._ms_since(t0),
            )

        # ---- Coerce + invoke ----
        context = CallContext(env=self.env, request_id=request_id, channel=channel)
        try:
            results = call(descriptor, context, args)
        except FuncBridgeError as e:
            return self._err(
                function_name, request_id, channel,
                code=e.code,
                message=e.message,
                details=e.details,
                latency_ms=self._ms_since(t0),
            )

        # ---- Output validation ----
        if validate_output:
            schema = response_schema(descriptor)
            if schema:
                try:
                    Draft202012Validator(schema).validate(build_success_response(results))
                except JsonSchemaValidationError as ve:
                    return self._err(
                        function_name, request_id, channel,
                        code=ErrorCode.VALIDATION_ERROR,
                        message="Output validation failed",
                        details={"error": ve.message, "path": [str(p) for p in ve.path]},
                        latency_ms=self._ms_since(t0),
                    )

        return CallResult(
            status="ok",
            function_name=function_name,
            request_id=request_id,
            results=results,
            error=None,
            meta={"latency_ms": self._ms_since(t0), "channel": channel, "source": self.source},
        )

    # ---- audit ----

    def _audit_start(self, request_id: str, function_name: str, channel: str, args: Any) -> Optional[str]:
        if self.audit is None:
            return None
        with self.audit.session() as db:
            dbrepo.log_event(db, request_id, "call_started", {"function_name": function_name, "channel": channel})
            return dbrepo.create_call_run(
                db,
                request_id,
                function_name,
                channel,
                args_json=dict(args) if isinstance(args, Mapping) else {"_raw": args},
            )

    def _audit_finish(self, call_run_id: Optional[str], res: CallResult) -> None:
        if self.audit is None or call_run_id is None:
            return
        with self.audit.session() as db:
            dbrepo.finalize_call_run(db, call_run_id, res.status, res.results, res.error or {}, res.meta["latency_ms"])
            if res.ok:
                dbrepo.log_event(db, res.request_id, "call_succeeded", {"function_name": res.function_name})
            else:
                dbrepo.log_event(
                    db, res.request_id, "call_failed", {"function_name": res.function_name, "error": res.error}
                )

    @staticmethod
    def _ms_since(t0: float) -> int:
        return int((time.time() - t0) * 1000)

    def _err(
        self,
        function_name: str,
        request_id: str,
        channel: str,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]],
        latency_ms: int,
    ) -> CallResult:
        return CallResult(
            status="error",
            function_name=function_name,
            request_id=request_id,
            results=[],
            error={"code": code, "message": message, "details": details or {}},
            meta={"latency_ms": latency_ms, "channel": channel, "source": self.source},
        )
