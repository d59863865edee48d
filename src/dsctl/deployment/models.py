"""Value types shared by the adapter, the batch executor and the CLI."""

from dataclasses import dataclass
from enum import Enum


class ServiceState(str, Enum):
    """State of a service as reported by the compose engine.

    ``UNAVAILABLE`` means no engine could be resolved; it is distinct from
    ``DOWN``.
    """

    RUNNING = "running"
    STOPPED = "stopped"
    DOWN = "down"
    UNAVAILABLE = "unavailable"

    @property
    def label(self) -> str:
        # Tables and reports call an absent engine "missing"
        return "missing" if self is ServiceState.UNAVAILABLE else self.value


class Operation(str, Enum):
    UP = "up"
    DOWN = "down"
    RELOAD = "reload"
    UPDATE = "update"


@dataclass(frozen=True)
class Outcome:
    """Result of one unit: a service, the operation, and its exit code."""

    service: str
    operation: Operation
    exit_code: int

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0
