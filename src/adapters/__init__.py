"""Adaptadores de I/O (httpx).

Por qué un paquete:
- Aísla el transporte HTTP del Core.
- `adapters.api_client` es la puerta de entrada para las aplicaciones.
"""
