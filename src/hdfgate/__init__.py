"""HDF Gate - threshold validation for HDF security scan results."""

__version__ = "1.0.0"
