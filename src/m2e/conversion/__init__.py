"""Conversion engine, detectors and pattern tables."""
