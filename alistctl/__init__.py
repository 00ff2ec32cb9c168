"""alistctl — install and manage an alist-backup service on systemd hosts."""

__version__ = "0.1.0"
