"""Regex pattern builders and declarative pattern tables."""
