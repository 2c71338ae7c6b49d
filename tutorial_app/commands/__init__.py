from .seed_commands import seed_command
from .setup_commands import ensure_schema, setup_command

__all__ = ["ensure_schema", "seed_command", "setup_command"]
