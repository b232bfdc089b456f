"""
Flexophore Package

Pharmacophore complete graphs with distance histograms over conformer
ensembles, and an objective function scoring node mappings between them.
"""

from .config import MatchingConfig, ScalingConfig
from .exceptions import (FlexophoreError, ConfigurationError, InvalidGraphError,
                         CapabilityNotSupportedError, DescriptorCalculationError)
from .interaction_table import InteractionDistanceTable, default_table
from .pp_node import PPNode
from .mol_dist_hist import MolDistHist, MolDistHistViz
from .solution import Solution
from .completegraphmatcher import ObjectiveFlexophoreHardMatchUncovered

__version__ = "1.0.0"

__all__ = [
    'MatchingConfig',
    'ScalingConfig',
    'FlexophoreError',
    'ConfigurationError',
    'InvalidGraphError',
    'CapabilityNotSupportedError',
    'DescriptorCalculationError',
    'InteractionDistanceTable',
    'default_table',
    'PPNode',
    'MolDistHist',
    'MolDistHistViz',
    'Solution',
    'ObjectiveFlexophoreHardMatchUncovered',
]
