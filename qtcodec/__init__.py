"""Quadtree compression of greyscale PGM images into the QTC format, with a command-line front end."""

__version__ = "0.1.0"