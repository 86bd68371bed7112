"""Capture, processing and recording helpers for the RealSense viewer."""
