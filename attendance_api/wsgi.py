# attendance_api/wsgi.py
import os

from attendance_api import create_app

app = create_app(os.getenv("APP_CONFIG_OBJECT") or None)
