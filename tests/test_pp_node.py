import pytest

from flexophore.exceptions import InvalidGraphError
from flexophore.pp_node import PPNode, nodes_from_types


class TestConstruction:
    def test_types_sorted_and_unique(self):
        node = PPNode((5, 1, 5))
        assert node.interaction_types == (1, 5)
        assert node.interaction_type_count == 2

    def test_order_does_not_matter(self):
        assert PPNode.of(1, 5) == PPNode.of(5, 1)

    def test_id_out_of_range(self):
        with pytest.raises(InvalidGraphError):
            PPNode.of(30001)
        with pytest.raises(InvalidGraphError):
            PPNode.of(-1)

    def test_immutable(self):
        node = PPNode.of(1)
        with pytest.raises(AttributeError):
            node.hetero = True

    def test_nodes_from_types(self):
        nodes = nodes_from_types([(0,), (1, 5)])
        assert len(nodes) == 2
        assert all(n.has_hetero_atom() for n in nodes)


class TestFlags:
    def test_hetero(self):
        assert PPNode.of(1, hetero=True).has_hetero_atom()
        assert PPNode.of(6).is_carbon_exclusive_node()

    def test_with_mandatory(self):
        node = PPNode.of(1, hetero=True).with_mandatory()
        assert node.mandatory
        assert node.hetero

    def test_merge(self):
        merged = PPNode.of(0, hetero=True).merge(PPNode.of(5, mandatory=True))
        assert merged.interaction_types == (0, 5)
        assert merged.hetero and merged.mandatory

    def test_equal_atoms_ignores_flags(self):
        assert PPNode.of(1, hetero=True).equal_atoms(PPNode.of(1))
        assert not PPNode.of(1).equal_atoms(PPNode.of(2))


class TestTextFormat:
    def test_str(self):
        assert str(PPNode.of(2, 1, hetero=True, mandatory=True)) == "(1,2)h*"
        assert str(PPNode.of(6)) == "(6)"

    def test_read(self):
        node = PPNode.read("(1,2)h*")
        assert node == PPNode.of(1, 2, hetero=True, mandatory=True)
        assert PPNode.read(" (6) ") == PPNode.of(6)

    def test_read_empty_types(self):
        assert PPNode.read("()").interaction_type_count == 0

    @pytest.mark.parametrize("text", ["1,2", "(1,x)", "(1)*h", "[1]"])
    def test_read_malformed(self, text):
        with pytest.raises(InvalidGraphError):
            PPNode.read(text)
