from .settings import ClientConfig

__all__ = ["ClientConfig"]
