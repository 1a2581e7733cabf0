"""Adaptadores de I/O: cliente de GitHub y desempaquetado de artefactos."""
