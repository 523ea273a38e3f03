#!/usr/bin/env python3
"""Entry point for the LeagueFindr API."""
import os
from leaguefindr.app import create_app

config_name = os.environ.get('FLASK_ENV', 'development')
app = create_app(config_name)

if __name__ == '__main__':
    port = int(os.environ.get('PORT', 8080))
    print(f"LeagueFindr API starting on http://localhost:{port}")
    app.run(host='0.0.0.0', port=port, debug=(config_name == 'development'))
