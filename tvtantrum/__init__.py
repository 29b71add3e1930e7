"""
TV Tantrum catalog: filtering, sorting and serving children's TV shows
rated by stimulation score.
"""

__version__ = "1.0.0"
