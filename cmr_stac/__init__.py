"""CMR-STAC

A translation layer that serves CMR metadata search results as a STAC API.
"""

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("cmr-stac")
except PackageNotFoundError:
    # Source checkout without an install
    __version__ = "1.0.0"
__author__ = "CMR-STAC"
