"""Core: configuración, dominio, contratos y errores.

No depende de httpx ni de la CLI.
"""
