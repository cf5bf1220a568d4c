"""Log Context Management.

Thread-safe logging context using contextvars. HTTP requests bind a
request ID; lifecycle operations bind the import they act on, so every
log line emitted while consolidating or generating documents carries
the import_id without passing it around.
"""

import uuid
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, Optional


_request_id_var: ContextVar[str] = ContextVar("request_id", default="")
_import_id_var: ContextVar[Optional[int]] = ContextVar("import_id", default=None)
_operation_var: ContextVar[str] = ContextVar("operation", default="")


def generate_request_id() -> str:
    """Generate a unique request ID using UUID4."""
    return str(uuid.uuid4())


def get_request_id() -> str:
    """Get the current request ID from context."""
    return _request_id_var.get()


def get_context_dict() -> dict[str, Any]:
    """Get all context variables as a dictionary for log binding."""
    ctx: dict[str, Any] = {}
    req_id = _request_id_var.get()
    if req_id:
        ctx["request_id"] = req_id
    import_id = _import_id_var.get()
    if import_id is not None:
        ctx["import_id"] = import_id
    operation = _operation_var.get()
    if operation:
        ctx["operation"] = operation
    return ctx


@dataclass
class RequestContext:
    """Binds a request ID to all log entries within the block.

    Example:
        with RequestContext() as ctx:
            logger.info("processing request")  # includes request_id
    """

    request_id: str = ""
    _tokens: list = field(default_factory=list, repr=False)

    def __post_init__(self):
        if not self.request_id:
            self.request_id = generate_request_id()

    def __enter__(self) -> "RequestContext":
        self._tokens = [_request_id_var.set(self.request_id)]
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        _request_id_var.reset(self._tokens.pop())


@dataclass
class ImportContext:
    """Binds an import ID and operation name for the duration of a block.

    Nested contexts restore the outer binding on exit, which lets the
    auto-document job wrap each import it processes.
    """

    import_id: Optional[int] = None
    operation: str = ""
    _tokens: list = field(default_factory=list, repr=False)

    def __enter__(self) -> "ImportContext":
        self._tokens = [
            _import_id_var.set(self.import_id),
            _operation_var.set(self.operation),
        ]
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        import_token, operation_token = self._tokens
        _operation_var.reset(operation_token)
        _import_id_var.reset(import_token)
        self._tokens = []

    def bind(self, import_id: int) -> None:
        """Attach the import ID once it is known (e.g. right after creation)."""
        self.import_id = import_id
        _import_id_var.set(import_id)
