"""
Generation of Flexophore descriptors from conformer ensembles.

``CGMult`` aggregates the node distance tables of many conformations into
distance histograms. ``create_descriptor`` drives the whole chain for an
RDKit molecule: conformer embedding, pharmacophore feature perception and
histogram aggregation.
"""

from __future__ import annotations
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple
import logging
import os

import numpy as np
from rdkit import Chem, RDConfig
from rdkit.Chem import AllChem, ChemicalFeatures, rdMolDescriptors

from .config import BINS_HISTOGRAM, MAX_NUM_NODES_FLEXOPHORE, NUM_CONFORMATIONS, RANGE_HISTOGRAM
from .exceptions import DescriptorCalculationError, InvalidGraphError
from .interaction_table import FEATURE_FAMILIES
from .mol_dist_hist import MolDistHist, MolDistHistViz, num_histograms
from .pp_node import PPNode

logger = logging.getLogger(__name__)

MIN_NUM_ATOMS = 6
MAX_NUM_ATOMS = MAX_NUM_NODES_FLEXOPHORE * 3

_feature_factory = None


def _get_feature_factory():
    global _feature_factory
    if _feature_factory is None:
        fdef = os.path.join(RDConfig.RDDataDir, 'BaseFeatures.fdef')
        _feature_factory = ChemicalFeatures.BuildFeatureFactory(fdef)
    return _feature_factory


def histogram_from_distances(distances: Sequence[float], bins: int = BINS_HISTOGRAM,
                             range_max: float = RANGE_HISTOGRAM,
                             num_conformations: Optional[int] = None) -> np.ndarray:
    """
    Histogram of inter-node distances over ``[0, range_max]``.

    Distances beyond the range are counted in the last bin. If
    ``num_conformations`` is given the counts are rescaled so that they sum
    to it, which keeps ensembles of different sizes comparable.

    Returns:
        ``uint8`` array of length ``bins``
    """
    d = np.asarray(distances, dtype=float)
    d = d[~np.isnan(d)]
    d = np.clip(d, 0.0, range_max)
    counts, _ = np.histogram(d, bins=bins, range=(0.0, range_max))
    counts = counts.astype(float)
    if num_conformations is not None and d.size > 0:
        counts = np.floor(counts * num_conformations / d.size + 0.5)
    return np.clip(counts, 0, 255).astype(np.uint8)


class CompleteGraph:
    """Pharmacophore nodes with the distance table of one conformation."""

    def __init__(self, nodes: Sequence[PPNode], coordinates):
        coords = np.asarray(coordinates, dtype=float)
        if coords.shape != (len(nodes), 3):
            raise InvalidGraphError(
                f"Expected coordinates of shape ({len(nodes)}, 3), got {coords.shape}")
        self.nodes = tuple(nodes)
        diff = coords[:, None, :] - coords[None, :, :]
        self.edges = np.sqrt((diff ** 2).sum(axis=-1))

    @property
    def num_nodes(self) -> int:
        return len(self.nodes)


class CGMult:
    """
    Pharmacophore nodes and the distance tables of several conformations.
    """

    def __init__(self, cg: CompleteGraph, bins: int = BINS_HISTOGRAM,
                 range_histogram: float = RANGE_HISTOGRAM,
                 num_conformations: int = NUM_CONFORMATIONS):
        self.nodes = cg.nodes
        self.dist_tables: List[np.ndarray] = [cg.edges]
        self.bins = bins
        self.range_histogram = range_histogram
        self.num_conformations = num_conformations

    def add(self, cg: CompleteGraph):
        """Add the distances of another conformation with the same nodes."""
        if cg.num_nodes != len(self.nodes):
            raise InvalidGraphError(
                f"Number of nodes differs: {len(self.nodes)} and {cg.num_nodes}.")
        for mine, other in zip(self.nodes, cg.nodes):
            if not mine.equal_atoms(other):
                raise InvalidGraphError("Node type differs.")
        self.dist_tables.append(cg.edges)

    @property
    def num_conformations_added(self) -> int:
        return len(self.dist_tables)

    def _histograms(self) -> np.ndarray:
        n = len(self.nodes)
        stack = np.stack(self.dist_tables)
        arr = np.zeros((num_histograms(n), self.bins), dtype=np.uint8)
        k = 0
        for i in range(n):
            for j in range(i + 1, n):
                arr[k] = histogram_from_distances(stack[:, i, j], self.bins,
                                                  self.range_histogram,
                                                  self.num_conformations)
                k += 1
        return arr

    def get_mol_dist_hist(self) -> MolDistHist:
        return MolDistHist(self.nodes, self._histograms(), bins=self.bins)

    def get_mol_dist_hist_viz(self) -> MolDistHistViz:
        return MolDistHistViz(self.nodes, self._histograms(), bins=self.bins)


# ───────────────────────── RDKit molecules ──────────────────────────
def conformations_to_generate(mol: Chem.Mol, max_num_conf: int = NUM_CONFORMATIONS) -> int:
    """Three conformations per rotatable bond combination, capped at ``max_num_conf``."""
    rot = rdMolDescriptors.CalcNumRotatableBonds(mol)
    return int(min(3 ** rot, max_num_conf))


def pharmacophore_nodes(mol: Chem.Mol) -> Tuple[List[PPNode], List[Tuple[int, ...]]]:
    """
    Pharmacophore nodes of a molecule.

    Features covering the same atoms are merged into one node carrying all
    their families as interaction types.

    Returns:
        The nodes and, per node, the atom indices it is centred on
    """
    feats = _get_feature_factory().GetFeaturesForMol(mol)
    families: Dict[FrozenSet[int], List[int]] = {}
    order: List[FrozenSet[int]] = []
    for feat in feats:
        atoms = frozenset(feat.GetAtomIds())
        if atoms not in families:
            families[atoms] = []
            order.append(atoms)
        families[atoms].append(FEATURE_FAMILIES.index(feat.GetFamily()))

    nodes, atom_sets = [], []
    for atoms in order:
        hetero = any(mol.GetAtomWithIdx(a).GetAtomicNum() != 6 for a in atoms)
        nodes.append(PPNode(tuple(families[atoms]), hetero=hetero))
        atom_sets.append(tuple(sorted(atoms)))
    return nodes, atom_sets


def create_descriptor(mol: Chem.Mol, num_conformations: Optional[int] = None,
                      seed: int = 42, optimize: bool = True,
                      viz: bool = False) -> MolDistHist:
    """
    Create the Flexophore of a molecule from an ensemble of conformers.

    Args:
        mol: RDKit molecule, hydrogens are added internally
        num_conformations: Conformers to embed, derived from the number of
            rotatable bonds if None
        seed: Random seed for the conformer embedding
        optimize: Whether to relax the conformers with MMFF
        viz: Return a MolDistHistViz instead of a MolDistHist

    Returns:
        The descriptor
    """
    if mol is None:
        raise DescriptorCalculationError("Invalid molecule")

    frags = Chem.GetMolFrags(mol, asMols=True)
    mol = max(frags, key=lambda m: m.GetNumHeavyAtoms())

    heavy = mol.GetNumHeavyAtoms()
    if heavy < MIN_NUM_ATOMS or heavy > MAX_NUM_ATOMS:
        raise DescriptorCalculationError(
            f"Molecule with {heavy} heavy atoms outside [{MIN_NUM_ATOMS}, {MAX_NUM_ATOMS}]")

    nodes, atom_sets = pharmacophore_nodes(mol)
    if not nodes:
        raise DescriptorCalculationError("No pharmacophore points found")
    if len(nodes) > MAX_NUM_NODES_FLEXOPHORE:
        raise DescriptorCalculationError(
            f"{len(nodes)} pharmacophore points exceed {MAX_NUM_NODES_FLEXOPHORE}")

    if num_conformations is None:
        num_conformations = conformations_to_generate(mol)

    mol_h = Chem.AddHs(mol)
    params = AllChem.ETKDGv3()
    params.randomSeed = seed
    conf_ids = list(AllChem.EmbedMultipleConfs(mol_h, numConfs=num_conformations, params=params))
    if not conf_ids:
        raise DescriptorCalculationError(
            f"Conformer embedding failed for {Chem.MolToSmiles(mol)}")
    if len(conf_ids) < num_conformations:
        logger.warning(f"Embedded {len(conf_ids)} of {num_conformations} conformers "
                       f"for {Chem.MolToSmiles(mol)}")

    if optimize:
        AllChem.MMFFOptimizeMoleculeConfs(mol_h)

    cg_mult = None
    for cid in conf_ids:
        conf = mol_h.GetConformer(cid)
        pos = conf.GetPositions()
        coords = np.array([pos[list(atoms)].mean(axis=0) for atoms in atom_sets])
        cg = CompleteGraph(nodes, coords)
        if cg_mult is None:
            cg_mult = CGMult(cg)
        else:
            cg_mult.add(cg)

    logger.info(f"Flexophore with {len(nodes)} nodes from {len(conf_ids)} conformers "
                f"for {Chem.MolToSmiles(mol)}")

    return cg_mult.get_mol_dist_hist_viz() if viz else cg_mult.get_mol_dist_hist()
