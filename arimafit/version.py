# arimafit/version.py
"""
arimafit version information.

arimafit follows semantic versioning (MAJOR.MINOR.PATCH):
- MAJOR: Incompatible API changes
- MINOR: Backwards-compatible functionality additions
- PATCH: Backwards-compatible bug fixes
"""

VERSION_MAJOR = 1
VERSION_MINOR = 0
VERSION_PATCH = 0

__version__ = f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}"

__title__ = "arimafit"
__description__ = "Seasonal ARIMA estimation and forecasting"
__license__ = "MIT"

__python_requires__ = ">=3.10"
