"""KennelHQ breeding management backend."""
