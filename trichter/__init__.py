"""Trichter runs API with realtime run notifications."""
