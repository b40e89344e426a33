"""sightreader: piano sight-reading exercise generator and trainer."""

__version__ = "0.1.0"
