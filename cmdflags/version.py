"""
cmdflags Version Information

The package version lives here and nowhere else; pyproject.toml and
cmdflags.__version__ must agree with it.
"""

# Version number (semantic versioning)
__version__ = "2.2.0"
