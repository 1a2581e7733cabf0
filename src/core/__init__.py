"""Core: configuración, dominio, contratos y pipeline de build."""
