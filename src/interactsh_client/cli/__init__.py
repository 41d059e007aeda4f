"""CLI (Typer + Rich) sobre la API pública del cliente."""
