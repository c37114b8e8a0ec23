"""Test package for respwire."""
