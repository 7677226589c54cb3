"""Flat Earth — Core Engine Package.

Coordinate model, great-circle distance, per-pixel day/night
classification and configuration for the azimuthal equidistant view.
"""
