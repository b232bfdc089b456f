import numpy as np
import pytest
from rdkit import Chem

from flexophore.exceptions import DescriptorCalculationError, InvalidGraphError
from flexophore.generator import (CGMult, CompleteGraph, conformations_to_generate,
                                  create_descriptor, histogram_from_distances,
                                  pharmacophore_nodes)
from flexophore.mol_dist_hist import MolDistHistViz
from flexophore.pp_node import PPNode

NODES = [PPNode.of(0, hetero=True), PPNode.of(1, hetero=True), PPNode.of(5)]


def triangle(scale=1.0):
    return CompleteGraph(NODES, np.array([[0, 0, 0], [3, 0, 0], [0, 4, 0]]) * scale)


class TestHistogramFromDistances:
    def test_binning(self):
        h = histogram_from_distances([1.0] * 100)
        assert h.dtype == np.uint8
        assert h[2] == 100
        assert h.sum() == 100

    def test_beyond_range_in_last_bin(self):
        h = histogram_from_distances([25.0, 19.9])
        assert h[-1] == 2

    def test_rescaled_to_conformations(self):
        h = histogram_from_distances([1.0] * 5 + [6.0] * 5, num_conformations=100)
        assert h[2] == 50
        assert h[12] == 50

    def test_counts_capped(self):
        assert histogram_from_distances([1.0] * 300)[2] == 255


class TestCGMult:
    def test_distances(self):
        assert triangle().edges[1, 2] == pytest.approx(5.0)

    def test_aggregate(self):
        cg_mult = CGMult(triangle())
        cg_mult.add(triangle(2.0))
        assert cg_mult.num_conformations_added == 2

        mdh = cg_mult.get_mol_dist_hist()
        assert mdh.num_nodes == 3
        # 3 A and 6 A between node 0 and 1
        assert mdh.dist_hist(0, 1)[6] == 50
        assert mdh.dist_hist(0, 1)[12] == 50
        assert isinstance(cg_mult.get_mol_dist_hist_viz(), MolDistHistViz)

    def test_node_count_mismatch(self):
        cg_mult = CGMult(triangle())
        with pytest.raises(InvalidGraphError):
            cg_mult.add(CompleteGraph(NODES[:2], np.zeros((2, 3))))

    def test_node_type_mismatch(self):
        cg_mult = CGMult(triangle())
        other = [PPNode.of(2), NODES[1], NODES[2]]
        with pytest.raises(InvalidGraphError):
            cg_mult.add(CompleteGraph(other, np.zeros((3, 3))))

    def test_coordinate_shape(self):
        with pytest.raises(InvalidGraphError):
            CompleteGraph(NODES, np.zeros((2, 3)))


class TestRDKit:
    def test_rigid_molecule(self):
        assert conformations_to_generate(Chem.MolFromSmiles("c1ccccc1O")) == 1

    def test_conformations_capped(self):
        mol = Chem.MolFromSmiles("CCCCCCCCCCCCCCCC")
        assert conformations_to_generate(mol, 50) == 50

    def test_pharmacophore_nodes(self):
        mol = Chem.MolFromSmiles("CC(=O)Nc1ccc(O)cc1")
        nodes, atom_sets = pharmacophore_nodes(mol)
        assert len(nodes) == len(atom_sets)
        assert any(n.has_hetero_atom() for n in nodes)
        assert any(len(atoms) == 6 for atoms in atom_sets)

    def test_create_descriptor(self):
        mol = Chem.MolFromSmiles("CC(=O)Nc1ccc(O)cc1")
        mdh = create_descriptor(mol, num_conformations=5, seed=7)
        assert mdh.num_nodes >= 2
        assert np.all(mdh.histograms.sum(axis=1) == 100)

    def test_descriptor_viz(self):
        mol = Chem.MolFromSmiles("CC(=O)Nc1ccc(O)cc1")
        assert isinstance(create_descriptor(mol, num_conformations=2, viz=True), MolDistHistViz)

    def test_too_small(self):
        with pytest.raises(DescriptorCalculationError):
            create_descriptor(Chem.MolFromSmiles("CCO"))

    def test_invalid_molecule(self):
        with pytest.raises(DescriptorCalculationError):
            create_descriptor(None)
