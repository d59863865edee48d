"""Stack management: service index, compose adapter, batch executor, live view."""

from .batch import BatchExecutor, format_report
from .compose import ComposeAdapter
from .live import run_live
from .models import Operation, Outcome, ServiceState
from .services import is_stack, list_services

__all__ = [
    "BatchExecutor",
    "ComposeAdapter",
    "Operation",
    "Outcome",
    "ServiceState",
    "format_report",
    "is_stack",
    "list_services",
    "run_live",
]
