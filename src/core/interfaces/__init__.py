"""Interfaces/abstracciones del Core.

Define contratos (Protocol) que implementan adaptadores concretos.
"""

from core.interfaces.build_host import BuildHost

__all__ = ["BuildHost"]
