# Settings are read once at import time; point them at in-memory SQLite and
# the mock verification/email backends before any test module imports them.
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TURNSTILE_MODE"] = "mock"
os.environ["TURNSTILE_SECRET_KEY"] = ""
os.environ["EMAIL_BACKEND"] = "mock"
