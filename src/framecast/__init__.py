"""framecast: frame-accurate slideshow-to-video rendering."""

__version__ = "0.1.0"
