"""Marto marketplace API: merchants, clients and deliverers."""

__version__ = "1.0.0"
