"""Pytest bootstrap configuration.

Pin environment-derived settings before test collection and before the
modules that read application settings are imported.
"""
import os

# Keep tests independent of any developer .env / shell configuration
os.environ["STORAGE__BUCKET"] = ""
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
