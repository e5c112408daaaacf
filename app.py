"""
Letterbox Newsletter Service
============================

Run with:
    python app.py

Visit:
    http://localhost:3000              - Signup form
    http://localhost:3000/unsubscribe  - Unsubscribe links land here
    http://localhost:3000/health       - Health check
"""

import logging

from flask import Flask
from letterbox import Letterbox, Config

logging.basicConfig(level=logging.INFO,
                    format='[%(asctime)s] %(levelname)s in %(module)s: %(message)s')

# Create Flask app
app = Flask(__name__)

# Initialize Letterbox - reads the environment (.env) and registers the routes
letterbox = Letterbox(app)


if __name__ == '__main__':
    print("\n" + "=" * 60)
    print("Letterbox Newsletter Service")
    print("=" * 60)
    print(f"Signup form:     http://localhost:{Config.PORT}")
    print(f"Public base URL: {app.config['PUBLIC_BASE_URL']}")
    print("=" * 60 + "\n")

    app.run(host='0.0.0.0', port=Config.PORT, debug=False)
