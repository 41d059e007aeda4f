"""Servicios del Core: identidad, descifrado, sesión, stream y builder."""
