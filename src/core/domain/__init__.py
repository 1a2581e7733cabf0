"""Modelos y errores del dominio.

Estructuras puras (Pydantic v2): el dominio no conoce HTTP ni la CLI.
"""
