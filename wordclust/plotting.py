"""
Optional plots over the engine's results.

Nothing in the clustering engine imports this module; it only reads
GapCurve, Partition and SilhouetteReport objects.
"""

import os

import matplotlib.pyplot as plt
import numpy as np
from sklearn.decomposition import PCA


def _save(fig, save_path):
    if save_path is None:
        return
    try:
        directory = os.path.dirname(save_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        fig.savefig(save_path, dpi=300, bbox_inches="tight")
        print(f"Plot saved as: {save_path}")
    except OSError as e:
        print(f"Could not save plot: {str(e)}")


def plot_gap_curve(curve, chosen_k=None, figsize=(10, 6), save_path=None):
    """
    Gap statistic against K with one-standard-error bars

    Parameters:
    - curve: GapCurve returned by select()
    - chosen_k: selected number of clusters, marked with a dashed line
    - figsize: figure size tuple
    - save_path: file to write the figure to (not saved when None)
    """
    fig, ax = plt.subplots(figsize=figsize)
    ax.errorbar(
        curve.ks,
        curve.gap,
        yerr=curve.se,
        fmt="bo-",
        linewidth=2,
        markersize=8,
        capsize=4,
    )
    ax.set_xlabel("Number of Clusters (K)", fontsize=12)
    ax.set_ylabel("Gap Statistic", fontsize=12)
    ax.set_title("Gap Statistic Analysis", fontsize=14, fontweight="bold")
    ax.set_xticks(curve.ks)
    ax.grid(True, alpha=0.3)

    if chosen_k is not None:
        ax.axvline(
            x=chosen_k,
            color="red",
            linestyle="--",
            label=f"Optimal K={chosen_k}",
        )
        ax.legend()

    fig.tight_layout()
    _save(fig, save_path)
    return fig


def plot_silhouette(report, figsize=(10, 8), save_path=None):
    """Silhouette widths of every item, grouped by cluster and sorted."""
    k = len(report.cluster_means)
    fig, ax = plt.subplots(figsize=figsize)
    y_lower = 10

    for i in range(k):
        # Aggregate silhouette widths of the items in cluster i
        ith_values = np.sort(report.widths[report.labels == i])
        size_cluster_i = ith_values.shape[0]
        y_upper = y_lower + size_cluster_i

        color = plt.cm.nipy_spectral(float(i) / k)
        ax.fill_betweenx(
            np.arange(y_lower, y_upper),
            0,
            ith_values,
            facecolor=color,
            edgecolor=color,
            alpha=0.7,
        )
        ax.text(-0.05, y_lower + 0.5 * size_cluster_i, str(i))
        y_lower = y_upper + 10

    ax.axvline(
        x=report.average,
        color="red",
        linestyle="--",
        label=f"Avg: {report.average:.3f}",
    )
    ax.set_xlabel("Silhouette Coefficient Values")
    ax.set_ylabel("Cluster Label")
    ax.set_title(f"Silhouette Plot, K={k}", fontsize=14, fontweight="bold")
    ax.set_xlim([-1, 1])
    ax.set_ylim([0, len(report.widths) + (k + 1) * 10])
    ax.set_yticks([])
    ax.legend()

    fig.tight_layout()
    _save(fig, save_path)
    return fig


def plot_clusters(data, partition, item_ids=None, figsize=(10, 8), save_path=None):
    """Scatter of the items on their first two principal components."""
    X = np.asarray(data, dtype=float)
    if X.shape[1] > 2:
        pca = PCA(n_components=2)
        X_2d = pca.fit_transform(X)
        centers_2d = pca.transform(partition.centroids)
        explained_var = pca.explained_variance_ratio_
        xlabel = f"PCA Component 1 ({explained_var[0]:.1%} variance)"
        ylabel = f"PCA Component 2 ({explained_var[1]:.1%} variance)"
    else:
        X_2d = np.column_stack([X, np.zeros(len(X))]) if X.shape[1] == 1 else X
        centers_2d = partition.centroids
        if centers_2d.shape[1] == 1:
            centers_2d = np.column_stack([centers_2d, np.zeros(len(centers_2d))])
        xlabel, ylabel = "Feature 1", "Feature 2"

    fig, ax = plt.subplots(figsize=figsize)
    for i in range(partition.k):
        mask = partition.labels == i
        ax.scatter(
            X_2d[mask, 0],
            X_2d[mask, 1],
            color=plt.cm.nipy_spectral(float(i) / partition.k),
            alpha=0.7,
            s=50,
            label=f"Cluster {i} (n={int(np.sum(mask))})",
        )
    ax.scatter(
        centers_2d[:, 0],
        centers_2d[:, 1],
        c="black",
        s=200,
        marker="X",
        label="Centroids",
    )

    if item_ids is not None:
        for (x, y), item in zip(X_2d, item_ids):
            ax.annotate(str(item), (x, y), fontsize=7, alpha=0.6)

    ax.set_xlabel(xlabel, fontsize=12)
    ax.set_ylabel(ylabel, fontsize=12)
    ax.set_title(f"K-Means Clusters (K={partition.k})", fontsize=14, fontweight="bold")
    ax.legend(bbox_to_anchor=(1.05, 1), loc="upper left")
    ax.grid(True, alpha=0.3)

    fig.tight_layout()
    _save(fig, save_path)
    return fig
