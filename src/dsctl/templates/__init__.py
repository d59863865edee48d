"""Jinja2 templates used to scaffold new services (``dsctl new``)."""

__all__ = []
