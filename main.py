"""
Main entry point for the SV2 UI gateway.
"""
from sv2_ui.cli import app

if __name__ == "__main__":
    app()
