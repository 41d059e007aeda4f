"""Adaptadores concretos: HTTP (httpx), canal con el servidor y criptografía.

Cada módulo implementa el *cómo* de un contrato del Core.
"""
