"""clrscan: read-side reconstruction of clr.fund rounds and recipient registries."""

__version__ = "0.1.0"
