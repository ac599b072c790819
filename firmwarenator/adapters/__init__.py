from .commands import CommandResult, run_command, run_pipeline
from .kernel_log import KernelLogReader

__all__ = [
    "CommandResult",
    "run_command",
    "run_pipeline",
    "KernelLogReader",
]
