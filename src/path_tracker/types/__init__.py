from .end import _END, StreamEnd

__all__ = ["_END", "StreamEnd"]
