from .line_sink import LineSink, SinkWriteError

__all__ = [
    "LineSink",
    "SinkWriteError",
]
