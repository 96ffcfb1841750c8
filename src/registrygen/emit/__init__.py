from registrygen.emit.sink import FileSink, FilesystemSink, InMemorySink

__all__ = [
    "FileSink",
    "FilesystemSink",
    "InMemorySink",
]
