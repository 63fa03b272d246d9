from rich.console import Console
from functools import lru_cache

_verbose = False

@lru_cache(maxsize=1)
def get_console() -> Console:
    """Get or create the shared Console instance"""
    return Console()

def set_verbose(enabled: bool) -> None:
    """Toggle logging of external command lines"""
    global _verbose
    _verbose = enabled


def log_command(cmd) -> None:
    """Log an external command line when running with --verbose"""
    if _verbose:
        get_console().log(f"[cyan]Running:[/] {' '.join(str(c) for c in cmd)}")
