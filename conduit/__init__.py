"""Conduit: persistence and domain core of a social blogging platform."""
