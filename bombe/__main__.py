"""
Bombe Module Entry Point
=========================

Allows running the Bombe CLI via: python -m bombe
"""

from bombe.cli import main

if __name__ == "__main__":
    main()
