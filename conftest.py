"""
Root conftest - shared pytest configuration and fixtures.
Ensures the webcam_analyzer package is discoverable when running pytest from the project root.
"""
import sys
from pathlib import Path

# Ensure project root is in path for 'from webcam_analyzer...' imports
_root = Path(__file__).resolve().parent
if str(_root) not in sys.path:
    sys.path.insert(0, str(_root))
