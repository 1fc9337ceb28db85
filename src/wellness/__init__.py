"""Personal wellness tracker with a menstrual cycle and metabolic engine."""

__version__ = "0.1.0"
