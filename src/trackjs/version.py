# Single source for the distribution version and the version sent to TrackJS.
__version__ = "3.10.4"
