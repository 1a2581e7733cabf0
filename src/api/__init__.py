"""Superficie HTTP (FastAPI) del servicio de builds."""

from api.app import create_app

__all__ = ["create_app"]
