import os

from dotenv import load_dotenv

# Load environment variables from .env file, if it exists
load_dotenv()

# Default work zone used until a manager configures one
DEFAULT_PERIMETER_LAT = float(os.getenv("DEFAULT_PERIMETER_LAT", "37.7749"))
DEFAULT_PERIMETER_LNG = float(os.getenv("DEFAULT_PERIMETER_LNG", "-122.4194"))
DEFAULT_PERIMETER_RADIUS_KM = float(os.getenv("DEFAULT_PERIMETER_RADIUS_KM", "2.0"))
DEFAULT_PERIMETER_NAME = os.getenv("DEFAULT_PERIMETER_NAME", "Main Site")

# Roles allowed to configure the perimeter and read the roster
MANAGER_ROLES = [
    role.strip()
    for role in os.getenv("MANAGER_ROLES", "manager").split(",")
    if role.strip()
]

# CORS origins
DEV_DOMAIN = os.getenv("DEV_DOMAIN", "http://localhost:3000")
PRODUCTION_DOMAIN = os.getenv("PRODUCTION_DOMAIN")

APP_LOG_LEVEL = os.getenv("APP_LOG_LEVEL", "info")
