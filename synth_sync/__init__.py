"""
synth-sync: keep a device's SynthRiders custom songs in step with the
SynthRiderz beatmap catalog.
"""

__version__ = "0.1.0"
