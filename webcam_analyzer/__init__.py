"""
Webcam Face Analyzer — root package.

This package contains the FastAPI app entry point (main.py), API routes,
dependency wiring, and the capture / detection / overlay processing core.
"""
