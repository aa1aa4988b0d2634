"""Curve, spline, profile and offset utilities."""
