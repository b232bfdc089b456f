"""
Scoring of node mappings between two Flexophore complete graphs.
"""

from .histogram import HistogramMatchCalculator, blur_histogram, histogram_overlap
from .mst import coverage_ratio, minimum_spanning_tree, relative_distance_matrix
from .node_similarity import NodeSimilarity, PPNodeSimilarity
from .objective import ObjectiveFlexophoreHardMatchUncovered, SimilarityResult
from .scaling import ScaleClasses

__all__ = [
    'HistogramMatchCalculator',
    'blur_histogram',
    'histogram_overlap',
    'coverage_ratio',
    'minimum_spanning_tree',
    'relative_distance_matrix',
    'NodeSimilarity',
    'PPNodeSimilarity',
    'ObjectiveFlexophoreHardMatchUncovered',
    'SimilarityResult',
    'ScaleClasses',
]
