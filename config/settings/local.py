# config/settings/local.py
from .base import *  # noqa

DEBUG = os.getenv("DJANGO_DEBUG", "1") == "1"

LOGGING["handlers"]["console"]["formatter"] = "verbose"
