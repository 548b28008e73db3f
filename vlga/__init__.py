# vlga/__init__.py

"""
Voice-Leading Genetic Algorithm Package

This package contains modules for a genetic algorithm searching for chord
progressions that follow the rules of four-part voice leading.
It includes:
- music_constants: Pitch gamut, voice registers, chord spellings, rule weights
                   and the default run parameters.
- music_utils: The diatonic pitch model and chord classification (MusicUtils).
- evaluation: The voice-leading rules and their penalties.
- candidate: The Candidate genome with its derived harmonic views and fitness.
- variation: Chord-aware crossover and mutation policies.
- population: The elitist Population and tournament selection.
- genetic_algorithm_core: The GeneticAlgorithm generation loop and its stopping condition.
- explorer: One complete search run, with score and log persistence.
- score_writer: MusicXML rendering through music21.
- logging_utils: Logging setup for the command line.

The main script (voice_leading_explorer.py) imports directly from the submodules.
"""

__version__ = "1.0.0"
