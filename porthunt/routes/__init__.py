"""
Routes package initialization
"""

from porthunt.routes.recon import recon_bp
from porthunt.routes.api import api_bp

__all__ = ['recon_bp', 'api_bp']
