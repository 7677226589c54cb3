"""Flat Earth — matplotlib scene drawing and interactive viewer."""
