"""Global pytest configuration."""

import os

# Tag metrics from test runs before settings are first loaded
os.environ.setdefault("ENVIRONMENT", "test")
