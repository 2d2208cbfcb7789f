#!/usr/bin/env python3
"""
porthunt - TCP port scanning and service fingerprinting
Main entry point
"""

import os

from porthunt import create_app, socketio
from porthunt.config import DevelopmentConfig, ProductionConfig

config_class = ProductionConfig if os.environ.get('PORTHUNT_ENV') == 'production' else DevelopmentConfig
app = create_app(config_class)

if __name__ == '__main__':
    print("""
    porthunt - network reconnaissance
    Use responsibly and only on hosts you are authorized to assess!
    """)
    socketio.run(app, debug=app.config['DEBUG'], host='0.0.0.0', port=int(os.environ.get('PORT', 5000)),
                 allow_unsafe_werkzeug=True)
