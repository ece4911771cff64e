"""Build a taxonomically annotated reference genome database from NCBI downloads."""

__version__ = "0.1.0"
