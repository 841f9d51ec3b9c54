from .console import ConsoleObserver
from .file_debug import FileDebugObserver

__all__ = ["ConsoleObserver", "FileDebugObserver"]
