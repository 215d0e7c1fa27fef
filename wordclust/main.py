import argparse
import os
import pickle
import traceback

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from sklearn.preprocessing import StandardScaler

from . import config
from .gap_statistic import select
from .kmeans_model import fit
from .plotting import plot_clusters, plot_gap_curve, plot_silhouette
from .silhouette import evaluate


class WordClusteringAnalysis:
    def __init__(
        self,
        data_path=config.DATA_PATH,
        label_column=config.LABEL_COLUMN,
        features=None,
        results_dir=config.RESULTS_DIR,
        plots_dir=config.PLOTS_DIR,
        models_dir=config.MODELS_DIR,
    ):
        self.data_path = data_path
        self.label_column = label_column
        self.features = features
        self.results_dir = results_dir
        self.plots_dir = plots_dir
        self.models_dir = models_dir
        self.df = None
        self.items = None
        self.feature_names = None
        self.X_scaled = None
        self.scaler = None

    def check_data_quality(self, X, stage_name="Unknown"):
        print(f"\nData Quality Check - {stage_name}:")
        print(f"  Shape: {X.shape}")
        nan_count = int(X.isnull().sum().sum())
        inf_count = int(np.isinf(X.to_numpy(dtype=float)).sum())
        print(f"  NaN values: {nan_count}")
        print(f"  Infinite values: {inf_count}")
        return nan_count == 0 and inf_count == 0

    def make_sample_data(self, n_words=90):
        """Synthetic affect ratings with three loose groups of words"""
        rng = np.random.default_rng(config.RANDOM_SEED)
        centers = np.array([[7.0, 5.5, 6.5], [2.5, 6.0, 3.5], [5.0, 3.0, 5.0]])
        group = np.arange(n_words) % len(centers)
        ratings = centers[group] + rng.normal(0, 0.6, size=(n_words, 3))
        return pd.DataFrame(
            {
                self.label_column: [f"word_{i}" for i in range(n_words)],
                "Valence": ratings[:, 0],
                "Arousal": ratings[:, 1],
                "Dominance": ratings[:, 2],
            }
        )

    def load_and_preprocess_data(self):
        """Load ratings, average duplicate words and z-score every feature"""
        try:
            self.df = pd.read_csv(self.data_path)
            print(f"Loaded data with shape: {self.df.shape}")
            print(f"Columns: {list(self.df.columns)}")
        except FileNotFoundError:
            print(f"Data file not found at {self.data_path}")
            print("Creating sample data for testing...")
            self.df = self.make_sample_data()
            print("Sample data created successfully")

        if self.label_column not in self.df.columns:
            raise ValueError(
                f"Label column '{self.label_column}' not found in {list(self.df.columns)}"
            )

        if self.features:
            missing = [col for col in self.features if col not in self.df.columns]
            if missing:
                raise ValueError(f"Feature columns not found: {missing}")
            self.feature_names = list(self.features)
        else:
            numeric_cols = self.df.select_dtypes(include=[np.number]).columns
            self.feature_names = [
                col for col in numeric_cols if col != self.label_column
            ]

        print(f"Using features: {self.feature_names}")
        if not self.feature_names:
            raise ValueError("No suitable features found for clustering")

        # Several rows can rate the same word; average them
        n_rows = len(self.df)
        X = self.df.groupby(self.label_column, sort=False)[self.feature_names].mean()
        X = X.replace([np.inf, -np.inf], np.nan).dropna()
        print(f"Aggregated {n_rows} rows into {len(X)} unique items")
        self.check_data_quality(X, "After aggregation")

        if len(X) < 2:
            raise ValueError("At least two complete items are needed for clustering")

        self.items = X.index.to_numpy()
        self.scaler = StandardScaler()
        self.X_scaled = self.scaler.fit_transform(X)

        print(f"Final processed data shape: {self.X_scaled.shape}")
        return self.X_scaled

    def save_results(self, results):
        """Save assignments, the gap curve and a model bundle"""
        try:
            os.makedirs(self.results_dir, exist_ok=True)
            os.makedirs(self.models_dir, exist_ok=True)

            assignments = results["silhouette"].as_frame(item_ids=self.items)
            assignments_path = os.path.join(
                self.results_dir, "kmeans_clustering_results.csv"
            )
            assignments.to_csv(assignments_path, index=False)
            saved = [assignments_path]

            if results["gap_curve"] is not None:
                gap_path = os.path.join(self.results_dir, "gap_statistic.csv")
                results["gap_curve"].as_frame().to_csv(gap_path, index=False)
                saved.append(gap_path)

            model_path = os.path.join(self.models_dir, "kmeans_model.pkl")
            with open(model_path, "wb") as f:
                pickle.dump(
                    {
                        "partition": results["partition"],
                        "gap_curve": results["gap_curve"],
                        "silhouette": results["silhouette"],
                        "chosen_k": results["chosen_k"],
                        "items": self.items,
                        "feature_names": self.feature_names,
                        "scaler": self.scaler,
                        "X_scaled": self.X_scaled,
                    },
                    f,
                )
            saved.append(model_path)

            print("\nResults saved successfully!")
            print("Files saved:")
            for path in saved:
                print(f"  - {path}")

        except OSError as e:
            print(f"Error saving results: {str(e)}")

    def save_plots(self, results, show=False):
        gap_curve = results["gap_curve"]
        figures = []
        if gap_curve is not None:
            figures.append(
                plot_gap_curve(
                    gap_curve,
                    chosen_k=results["chosen_k"],
                    save_path=os.path.join(self.plots_dir, "gap_statistic.png"),
                )
            )
        figures.append(
            plot_silhouette(
                results["silhouette"],
                save_path=os.path.join(self.plots_dir, "silhouette.png"),
            )
        )
        figures.append(
            plot_clusters(
                self.X_scaled,
                results["partition"],
                save_path=os.path.join(self.plots_dir, "clusters.png"),
            )
        )
        if show:
            plt.show()
        for fig in figures:
            plt.close(fig)

    def run_analysis(
        self,
        k=None,
        k_max=config.K_MAX,
        n_refs=config.N_REFS,
        n_starts=config.N_STARTS,
        seed=config.RANDOM_SEED,
        pca_aligned=False,
        method=config.SELECTION_METHOD,
        init=config.INIT,
        n_jobs=None,
        save=True,
        plots=True,
        show=False,
    ):
        """
        Main analysis pipeline

        Parameters:
        - k: fixed number of clusters; when None it is chosen by the gap statistic
        - k_max: largest K tried by the gap statistic (capped at items - 1)
        - n_refs: number of reference datasets for the gap statistic
        - n_starts: k-means random starts per fit
        - seed: base seed for every random draw
        - save / plots / show: write result files, write plots, display plots
        """
        print("Starting Word Clustering Analysis")
        print("=" * 50)

        try:
            self.load_and_preprocess_data()
            n_items = self.X_scaled.shape[0]

            gap_curve = None
            if k is None:
                print("\n" + "=" * 30)
                print("GAP STATISTIC")
                print("=" * 30)

                if k_max > n_items - 1:
                    print(
                        f"Reducing k_max from {k_max} to {n_items - 1} ({n_items} items)"
                    )
                    k_max = n_items - 1

                chosen_k, gap_curve, partitions = select(
                    self.X_scaled,
                    k_max=k_max,
                    n_refs=n_refs,
                    n_starts=n_starts,
                    rng_seed=seed,
                    pca_aligned=pca_aligned,
                    method=method,
                    init=init,
                    n_jobs=n_jobs,
                    verbose=True,
                )
                partition = partitions[chosen_k]
            else:
                chosen_k = k
                partition = fit(
                    self.X_scaled,
                    k,
                    n_starts=n_starts,
                    rng_seed=seed,
                    init=init,
                    n_jobs=n_jobs,
                )

            print("\n" + "=" * 30)
            print("SILHOUETTE ANALYSIS")
            print("=" * 30)

            report = evaluate(self.X_scaled, partition)
            sizes_and_widths = zip(partition.sizes, report.cluster_means)
            for c, (size, width) in enumerate(sizes_and_widths):
                print(f"  Cluster {c}: {size} items, mean silhouette {width:.4f}")

            results = {
                "chosen_k": chosen_k,
                "partition": partition,
                "gap_curve": gap_curve,
                "silhouette": report,
            }

            if save:
                self.save_results(results)
            if plots:
                self.save_plots(results, show=show)

            print("\n" + "=" * 50)
            print("ANALYSIS SUMMARY")
            print("=" * 50)
            print(f"Items clustered: {n_items}")
            print(f"Features: {len(self.feature_names)}")
            print(f"Number of clusters: {chosen_k}")
            print(f"Within-cluster sum of squares: {partition.wcss:.4f}")
            print(f"Average silhouette width: {report.average:.4f}")

            return results

        except Exception as e:
            print(f"Error during analysis: {str(e)}")
            traceback.print_exc()
            return None


def build_parser():
    parser = argparse.ArgumentParser(
        description="K-means clustering of word affect ratings with gap statistic selection"
    )
    parser.add_argument("data_path", nargs="?", default=config.DATA_PATH)
    parser.add_argument("--label-column", default=config.LABEL_COLUMN)
    parser.add_argument("--features", nargs="+", default=None)
    parser.add_argument(
        "-k", "--k", type=int, default=None, help="skip selection and use this K"
    )
    parser.add_argument("--k-max", type=int, default=config.K_MAX)
    parser.add_argument("--n-refs", type=int, default=config.N_REFS)
    parser.add_argument("--n-starts", type=int, default=config.N_STARTS)
    parser.add_argument("--seed", type=int, default=config.RANDOM_SEED)
    parser.add_argument(
        "--pca-reference", action="store_true", help="PCA-aligned reference box"
    )
    parser.add_argument(
        "--method",
        default=config.SELECTION_METHOD,
        choices=["tibshirani", "globalmax", "firstmax"],
    )
    parser.add_argument(
        "--init", default=config.INIT, choices=["k-means++", "random"]
    )
    parser.add_argument("--n-jobs", type=int, default=None)
    parser.add_argument("--results-dir", default=config.RESULTS_DIR)
    parser.add_argument("--plots-dir", default=config.PLOTS_DIR)
    parser.add_argument("--models-dir", default=config.MODELS_DIR)
    parser.add_argument("--no-save", action="store_true")
    parser.add_argument("--no-plots", action="store_true")
    parser.add_argument("--show", action="store_true", help="display plots")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    analyzer = WordClusteringAnalysis(
        data_path=args.data_path,
        label_column=args.label_column,
        features=args.features,
        results_dir=args.results_dir,
        plots_dir=args.plots_dir,
        models_dir=args.models_dir,
    )
    results = analyzer.run_analysis(
        k=args.k,
        k_max=args.k_max,
        n_refs=args.n_refs,
        n_starts=args.n_starts,
        seed=args.seed,
        pca_aligned=args.pca_reference,
        method=args.method,
        init=args.init,
        n_jobs=args.n_jobs,
        save=not args.no_save,
        plots=not args.no_plots,
        show=args.show,
    )

    if results:
        print("\nAnalysis completed successfully!")
    else:
        print("\nAnalysis failed - check error messages above")

    return results


def cli(argv=None):
    return 0 if main(argv) else 1


if __name__ == "__main__":
    raise SystemExit(cli())
