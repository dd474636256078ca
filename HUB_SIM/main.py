"""
Main entry point for the Shared-Medium Hub Simulator.
"""

import sys
import os

# Add the parent directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from HUB_SIM.ui.cli import main as cli_main

def main(argv=None):
    """Start the hub or a station, depending on the command line."""
    return cli_main(argv)

if __name__ == "__main__":
    sys.exit(main())
