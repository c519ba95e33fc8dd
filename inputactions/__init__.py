"""Run commands when keys are pressed on a named Linux input device."""

__version__ = "0.1.0"
