"""
porthunt Test Suite
Tests for the port scanning engine and the reconnaissance collaborators
"""

import os
import sys

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)
