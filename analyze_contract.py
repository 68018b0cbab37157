#!/usr/bin/env python3
"""
Wrapper script that calls the contract analyzer CLI in src/

This allows users to run `python analyze_contract.py <address>` from the root directory.
"""

import sys
from pathlib import Path

# Add src directory to path
src_dir = Path(__file__).parent / "src"
sys.path.insert(0, str(src_dir))

# Import and run the main function
from evm_recon.main import main

if __name__ == "__main__":
    sys.exit(main())
