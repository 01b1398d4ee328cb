import importlib.metadata

try:
    __version__ = importlib.metadata.version(__name__.replace("_", "-"))
except importlib.metadata.PackageNotFoundError:
    __version__ = "unknown"
