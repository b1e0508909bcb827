"""Process-wide infrastructure."""
