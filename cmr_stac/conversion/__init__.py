"""Conversion between STAC and CMR: parameters, representations, extensions."""
