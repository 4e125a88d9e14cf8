from rich.console import Console
from functools import lru_cache


@lru_cache(maxsize=1)
def get_console() -> Console:
    """Shared Console every module logs to"""
    return Console()
