"""Container runtime adapters."""

from rexec.runtime.base import ExecRuntime
from rexec.runtime.docker_runtime import DockerRuntime

__all__ = [
    "DockerRuntime",
    "ExecRuntime",
]
