from .Tutorial import (
    DESCRIPTION_MAX_LENGTH,
    LEVEL_MAX,
    LEVEL_MIN,
    TITLE_MAX_LENGTH,
    Tutorial,
)

__all__ = [
    "Tutorial",
    "TITLE_MAX_LENGTH",
    "DESCRIPTION_MAX_LENGTH",
    "LEVEL_MIN",
    "LEVEL_MAX",
]
