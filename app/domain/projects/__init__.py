"""Project domain module."""
