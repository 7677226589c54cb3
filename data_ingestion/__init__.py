"""Flat Earth — Data Ingestion Package.

Azimuthal equidistant projection maths and world-map image loading.
"""
