from itertools import combinations

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

from .completegraphmatcher.histogram import blur_histogram


def similarity_frame(objective, solution):
    """Node similarity of every mapped pair as a DataFrame."""
    rows = []
    for k, (index_query, index_base) in enumerate(solution):
        rows.append({
            'heap': k,
            'query': index_query,
            'base': index_base,
            'query_node': str(objective.query.node(index_query)),
            'base_node': str(objective.base.node(index_base)),
            'similarity': objective.similarity_nodes(index_query, index_base),
        })
    return pd.DataFrame(rows, columns=['heap', 'query', 'base', 'query_node',
                                       'base_node', 'similarity'])


def histogram_frame(objective, solution):
    """Histogram similarity of every pair of mapped pairs as a DataFrame."""
    rows = []
    for (q1, b1), (q2, b2) in combinations(list(solution), 2):
        rows.append({
            'query_pair': (q1, q2),
            'base_pair': (b1, b2),
            'similarity': objective.similarity_histogram(q1, q2, b1, b2),
        })
    df = pd.DataFrame(rows, columns=['query_pair', 'base_pair', 'similarity'])
    df['valid'] = df['similarity'] >= objective.thresh_histogram_similarity
    return df


def plot_histograms(query, base, pair_query, pair_base, range_histogram=20.0,
                    fraction=0.05, filename=None):
    """Plot raw and blurred distance histograms of a query and a base node pair."""
    hist_query = query.dist_hist(*pair_query)
    hist_base = base.dist_hist(*pair_base)

    bins = len(hist_query)
    width = range_histogram / bins
    x = np.arange(bins) * width

    fig, axes = plt.subplots(1, 2, figsize=(12, 4), sharey=True)

    axes[0].bar(x - width / 4, hist_query, width / 2, label=f'Query {pair_query}')
    axes[0].bar(x + width / 4, hist_base, width / 2, label=f'Base {pair_base}')
    axes[0].set_title('Raw histograms')

    axes[1].bar(x - width / 4, blur_histogram(hist_query, fraction), width / 2,
                label=f'Query {pair_query}')
    axes[1].bar(x + width / 4, blur_histogram(hist_base, fraction), width / 2,
                label=f'Base {pair_base}')
    axes[1].set_title('Blurred histograms')

    for ax in axes:
        ax.set_xlabel('Distance (Å)')
        ax.legend()
    axes[0].set_ylabel('Conformations')

    plt.tight_layout()

    if filename:
        plt.savefig(filename)

    return fig
