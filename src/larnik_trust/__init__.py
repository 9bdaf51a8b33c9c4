"""Session credentials and payment gateway trust boundary for the Larnik LMS."""

__version__ = "0.1.0"
