"""Core del cliente: dominio, contratos, configuración y servicios.

Por qué separado de `adapters`:
- Aquí vive el *qué* (estado de sesión, taxonomía de errores, pipeline de
  descifrado); los adaptadores aportan el *cómo* (httpx, cryptography).
"""
