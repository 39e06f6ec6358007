"""Audio Clipper - cut named clips out of YouTube videos or uploaded audio."""

__version__ = "0.1.0"
