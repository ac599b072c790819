from .shell_config import BUILTIN_DEFAULTS, ShellConfig, parse_shell_assignments
from .resolver import resolve_run_config

__all__ = [
    "BUILTIN_DEFAULTS",
    "ShellConfig",
    "parse_shell_assignments",
    "resolve_run_config",
]
