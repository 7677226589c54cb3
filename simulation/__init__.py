"""Flat Earth — per-frame sun update and illumination pipeline."""
