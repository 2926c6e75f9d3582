"""Buyan Studio: compose Chinese characters from reusable SVG components."""

__version__ = "0.1.0"
