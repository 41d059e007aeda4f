"""Permite ejecutar la CLI con `python -m interactsh_client`."""

from interactsh_client.cli.main import run_cli

if __name__ == "__main__":
    run_cli()
