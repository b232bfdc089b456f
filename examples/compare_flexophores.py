import argparse
import logging
import os
import sys

from rdkit import Chem

# Add parent directory to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from flexophore import MatchingConfig, ObjectiveFlexophoreHardMatchUncovered, Solution
from flexophore.exceptions import FlexophoreError
from flexophore.generator import create_descriptor
from flexophore.utils import histogram_frame, similarity_frame

logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description='Score a node mapping between two Flexophores')
    parser.add_argument('--query', type=str, default="CC(=O)Oc1ccccc1C(=O)O",
                        help='SMILES of the query molecule (default: aspirin)')
    parser.add_argument('--base', type=str, default="OC(=O)c1ccccc1O",
                        help='SMILES of the base molecule (default: salicylic acid)')
    parser.add_argument('--mapping', type=str, default=None,
                        help='Mapping as "q:b,q:b,...", identity over the smaller graph if omitted')
    parser.add_argument('--config', type=str, default=None,
                        help='YAML file with matching parameters')
    parser.add_argument('--num_conformations', type=int, default=None,
                        help='Conformers per molecule (default: from rotatable bonds)')
    parser.add_argument('--query_bias', action='store_true',
                        help='Score coverage of the query only')
    parser.add_argument('--verbose', action='store_true')

    return parser.parse_args()


def parse_mapping(text):
    pairs = []
    for token in text.split(','):
        q, b = token.split(':')
        pairs.append((int(q), int(b)))
    return Solution(pairs)


def main():
    args = parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    config = MatchingConfig.from_yaml(args.config) if args.config else MatchingConfig()

    mol_query = Chem.MolFromSmiles(args.query)
    mol_base = Chem.MolFromSmiles(args.base)
    if mol_query is None or mol_base is None:
        logger.error("Invalid SMILES string")
        return 1

    try:
        query = create_descriptor(mol_query, args.num_conformations, viz=True)
        base = create_descriptor(mol_base, args.num_conformations, viz=True)
    except FlexophoreError as e:
        logger.error(f"Descriptor generation failed: {e}")
        return 1

    print(f"Query: {query}")
    print(f"Base: {base}")

    if args.mapping:
        solution = parse_mapping(args.mapping)
    else:
        n = min(query.num_nodes, base.num_nodes)
        solution = Solution((i, i) for i in range(n))

    objective = ObjectiveFlexophoreHardMatchUncovered(config)
    objective.set_query_bias(args.query_bias or config.query_bias)
    objective.set_query(query)
    objective.set_base(base)

    print("\nNode similarity matrix:")
    print(objective)

    valid = objective.is_valid_solution(solution)
    similarity = objective.get_similarity(solution)

    print(f"\n{solution}")
    print(f"Valid: {valid}")
    print(objective.format_recent_results())

    print(similarity_frame(objective, solution).to_string(index=False))
    print()
    print(histogram_frame(objective, solution).to_string(index=False))

    if valid:
        objective.set_matching_info_in_query_and_base(solution)
        print(f"\nQuery annotation: {query.annotations()}")
        print(f"Base annotation: {base.annotations()}")

    logger.info(f"Similarity {similarity:.4f}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
