"""
Post-processing passes run after greedy placement.
"""

from .gap_fill import GapEliminator, eliminate_gaps
from .referees import RefereeAssigner, assign_referees

__all__ = [
    "GapEliminator",
    "eliminate_gaps",
    "RefereeAssigner",
    "assign_referees",
]
