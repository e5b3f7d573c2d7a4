#!/usr/bin/env python3
"""
Production WSGI entry point for the ITURHFProp prediction service.
"""

import os

# Set production environment
os.environ.setdefault('FLASK_ENV', 'production')

from app_factory import create_app
from config import get_config

# Create the application
app = create_app(get_config())

if __name__ == '__main__':
    app.run(host='0.0.0.0', port=app.config['PORT'])
