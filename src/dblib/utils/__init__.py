from dblib.utils.decorators import traced

__all__ = [
    "traced",
]
