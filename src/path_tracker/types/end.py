class StreamEnd:
    """Sentinel placed on a service queue once its sampling loop has exited."""
    __slots__ = ()

    def __repr__(self) -> str:
        return "<StreamEnd>"

_END = StreamEnd()
