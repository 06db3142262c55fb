"""REST intake for kubeherald.

Exposes:
    create_app -- FastAPI application factory.
"""

from kubeherald.api.app import create_app

__all__ = ["create_app"]
