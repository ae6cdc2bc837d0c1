"""Services operating on journals."""

from .ping import DEFAULT_MIN_OJS_VERSION, VERSION_MISSING, Ping, version_below

__all__ = ["DEFAULT_MIN_OJS_VERSION", "Ping", "VERSION_MISSING", "version_below"]
