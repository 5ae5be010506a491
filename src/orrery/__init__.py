"""Solar system orrery: Keplerian positions and a scripted travel camera."""

__version__ = "0.1.0"
