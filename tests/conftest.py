"""Pytest configuration for all tests."""

import sys
import os

# Add src directory to Python path for all tests
src_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src'))
if src_dir not in sys.path:
    sys.path.insert(0, src_dir)
