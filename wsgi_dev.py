#!/usr/bin/env python3
"""
Development WSGI entry point for the ITURHFProp prediction service.
"""

import os

# Set development environment
os.environ['FLASK_ENV'] = 'development'

from app_factory import create_app
from config import DevelopmentConfig

# Create the application
app = create_app(DevelopmentConfig)

if __name__ == '__main__':
    app.run(debug=True, host='127.0.0.1', port=DevelopmentConfig.PORT)
