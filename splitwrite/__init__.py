"""Left-right concurrency primitive: one writer and many readers over a mirrored pair of data structures."""

__version__ = "0.1.0"
__all__ = ["aliasing", "absorb", "read", "write", "api"]