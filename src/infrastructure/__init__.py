"""Infrastructure Layer.

Adapters and entry points that perform I/O and hand domain Value Objects to
the domain services: raster loading, settings, and the command line.
"""
