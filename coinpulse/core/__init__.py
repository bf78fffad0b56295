"""
Core configuration, exceptions and utilities.
"""
