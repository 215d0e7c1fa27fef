import pickle

import numpy as np
import pandas as pd
import pytest

from wordclust.gap_statistic import choose_k
from wordclust.main import WordClusteringAnalysis, cli, main


@pytest.fixture
def ratings_csv(tmp_path):
    rng = np.random.default_rng(0)
    # Three groups along the diagonal of the rating square
    centers = np.array([[1.0, 1.0], [5.0, 5.0], [9.0, 9.0]])
    rows = []
    for i in range(30):
        valence, arousal = centers[i % 3] + rng.normal(0, 0.3, size=2)
        rows.append({"Word": f"w{i}", "Valence": valence, "Arousal": arousal, "Rater": i})
    # Second rating of the first word
    rows.append({"Word": "w0", "Valence": 1.4, "Arousal": 0.8, "Rater": 99})
    path = tmp_path / "ratings.csv"
    pd.DataFrame(rows).to_csv(path, index=False)
    return str(path)


def _analysis(tmp_path, data_path, **kwargs):
    return WordClusteringAnalysis(
        data_path=data_path,
        results_dir=str(tmp_path / "results"),
        plots_dir=str(tmp_path / "plots"),
        models_dir=str(tmp_path / "models"),
        **kwargs,
    )


def test_load_aggregates_duplicates_and_scales(tmp_path, ratings_csv):
    analysis = _analysis(tmp_path, ratings_csv, features=["Valence", "Arousal"])
    X = analysis.load_and_preprocess_data()

    assert X.shape == (30, 2)
    assert list(analysis.items[:2]) == ["w0", "w1"]
    np.testing.assert_allclose(X.mean(axis=0), [0.0, 0.0], atol=1e-12)
    np.testing.assert_allclose(X.std(axis=0), [1.0, 1.0])

    raw = analysis.scaler.inverse_transform(X[:1])[0]
    first = pd.read_csv(ratings_csv).query("Word == 'w0'")
    np.testing.assert_allclose(raw, first[["Valence", "Arousal"]].mean().to_numpy())


def test_numeric_columns_are_default_features(tmp_path, ratings_csv):
    analysis = _analysis(tmp_path, ratings_csv)
    analysis.load_and_preprocess_data()
    assert analysis.feature_names == ["Valence", "Arousal", "Rater"]


def test_run_analysis_selects_k_and_saves(tmp_path, ratings_csv):
    analysis = _analysis(tmp_path, ratings_csv, features=["Valence", "Arousal"])
    results = analysis.run_analysis(k_max=5, n_refs=8, n_starts=4, seed=0)

    assert results["chosen_k"] == choose_k(results["gap_curve"])
    assert results["chosen_k"] == 3
    assert results["partition"].k == 3
    assert len(results["gap_curve"]) == 5
    # One cluster per diagonal group
    labels = results["partition"].labels
    for group in range(3):
        assert len(set(labels[group::3])) == 1
    assert results["silhouette"].average > 0.7

    assignments = pd.read_csv(tmp_path / "results" / "kmeans_clustering_results.csv")
    assert list(assignments.columns) == ["item", "cluster", "neighbor", "silhouette"]
    assert len(assignments) == 30
    assert (tmp_path / "results" / "gap_statistic.csv").exists()
    for name in ("gap_statistic.png", "silhouette.png", "clusters.png"):
        assert (tmp_path / "plots" / name).exists()

    with open(tmp_path / "models" / "kmeans_model.pkl", "rb") as f:
        bundle = pickle.load(f)
    assert bundle["chosen_k"] == 3
    assert bundle["feature_names"] == ["Valence", "Arousal"]
    np.testing.assert_array_equal(bundle["partition"].labels, results["partition"].labels)


def test_run_analysis_with_fixed_k(tmp_path, ratings_csv):
    analysis = _analysis(tmp_path, ratings_csv, features=["Valence", "Arousal"])
    results = analysis.run_analysis(k=2, n_starts=3, save=False, plots=False)
    assert results["chosen_k"] == 2
    assert results["gap_curve"] is None
    assert results["partition"].k == 2


def test_k_max_is_capped_by_item_count(tmp_path):
    path = tmp_path / "small.csv"
    pd.DataFrame(
        {"Word": ["a", "b", "c", "d"], "Valence": [0.0, 0.1, 5.0, 5.1]}
    ).to_csv(path, index=False)
    analysis = _analysis(tmp_path, str(path))
    results = analysis.run_analysis(k_max=10, n_refs=3, n_starts=2, save=False, plots=False)
    assert len(results["gap_curve"]) == 3


def test_errors_are_reported_not_raised(tmp_path, ratings_csv, capsys):
    analysis = _analysis(tmp_path, ratings_csv, label_column="Lemma")
    assert analysis.run_analysis(save=False, plots=False) is None
    assert "Label column 'Lemma' not found" in capsys.readouterr().out

    analysis = _analysis(tmp_path, ratings_csv, features=["Valence"])
    assert analysis.run_analysis(k=31, save=False, plots=False) is None


def test_missing_file_falls_back_to_sample_data(tmp_path):
    analysis = _analysis(tmp_path, str(tmp_path / "missing.csv"))
    X = analysis.load_and_preprocess_data()
    assert X.shape == (90, 3)
    assert analysis.feature_names == ["Valence", "Arousal", "Dominance"]


def test_main_cli(tmp_path, ratings_csv):
    argv = [
        ratings_csv,
        "--features", "Valence", "Arousal",
        "--k-max", "4",
        "--n-refs", "4",
        "--n-starts", "3",
        "--results-dir", str(tmp_path / "results"),
        "--models-dir", str(tmp_path / "models"),
        "--no-plots",
    ]
    results = main(argv)
    assert results["partition"].k == results["chosen_k"]
    assert (tmp_path / "models" / "kmeans_model.pkl").exists()
    assert cli(argv + ["--no-save"]) == 0
    assert cli([ratings_csv, "--label-column", "Lemma", "--no-save", "--no-plots"]) == 1
