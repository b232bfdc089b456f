import numpy as np
import pytest

from flexophore.interaction_table import (FEATURE_FAMILIES, InteractionDistanceTable,
                                          default_table, family_ids)


class TestDefaultTable:
    def test_shared_instance(self):
        assert default_table() is default_table()

    def test_shape_and_symmetry(self):
        m = default_table().matrix
        assert m.shape == (len(FEATURE_FAMILIES), len(FEATURE_FAMILIES))
        assert np.allclose(m, m.T)
        assert np.all(np.diag(m) == 0)
        assert m.min() >= 0 and m.max() <= 1

    def test_lookup(self):
        table = default_table()
        donor, acceptor = family_ids(["Donor", "Acceptor"])
        assert table.distance(donor, acceptor) == pytest.approx(0.6)
        assert table.type_id("Aromatic") == 5

    def test_unknown_type(self):
        with pytest.raises(IndexError):
            default_table().distance(0, 99)


class TestConstruction:
    def test_not_symmetric(self):
        with pytest.raises(ValueError):
            InteractionDistanceTable([[0, 0.2], [0.5, 0]])

    def test_not_square(self):
        with pytest.raises(ValueError):
            InteractionDistanceTable(np.zeros((2, 3)))

    def test_non_finite(self):
        with pytest.raises(ValueError):
            InteractionDistanceTable([[0, np.nan], [np.nan, 0]])

    def test_clipped(self):
        table = InteractionDistanceTable.from_matrix([[0.3, 2.0], [2.0, 0.0]])
        assert table.distance(0, 1) == 1.0
        assert table.distance(0, 0) == 0.0

    def test_read_only(self):
        with pytest.raises(ValueError):
            default_table().matrix[0, 1] = 0.5

    def test_from_descriptors(self):
        optimal = [[3.0, 3.0, 5.0]]
        strength = [[-1.0, -1.0, -1.0]]
        occurrences = [[10, 10, 10]]
        table = InteractionDistanceTable.from_descriptors(optimal, strength, occurrences)
        assert table.distance(0, 1) == pytest.approx(0.0)
        assert table.distance(0, 2) == pytest.approx(1.0)
        assert table.distance(1, 2) == pytest.approx(1.0)

    def test_save_load(self, tmp_path):
        path = tmp_path / "table.npz"
        default_table().save(path)
        loaded = InteractionDistanceTable.load(path)
        assert np.allclose(loaded.matrix, default_table().matrix)
        assert loaded.labels == FEATURE_FAMILIES
