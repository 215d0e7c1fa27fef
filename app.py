import os
import pickle
import warnings

import matplotlib.pyplot as plt
import pandas as pd
import streamlit as st

from wordclust import config
from wordclust.plotting import plot_clusters, plot_gap_curve, plot_silhouette

warnings.filterwarnings("ignore")


# Set page config
st.set_page_config(page_title="Word Affect Clusters", page_icon="📚", layout="wide")

MODEL_PATH = os.path.join(config.MODELS_DIR, "kmeans_model.pkl")


class WordClusterPredictor:
    def __init__(self, model_path=MODEL_PATH):
        self.model_path = model_path
        self.bundle = None

    def load_models(self):
        """Load the saved partition, diagnostics and scaler"""
        if not os.path.exists(self.model_path):
            return False
        try:
            with open(self.model_path, "rb") as f:
                self.bundle = pickle.load(f)
            return True
        except (OSError, pickle.UnpicklingError) as e:
            st.error(f"Error loading models: {str(e)}")
            return False

    @property
    def partition(self):
        return self.bundle["partition"]

    @property
    def feature_names(self):
        return self.bundle["feature_names"]

    def preprocess_input(self, user_input):
        """Scale raw ratings the same way as the training data"""
        input_df = pd.DataFrame([user_input], columns=self.feature_names)
        return self.bundle["scaler"].transform(input_df)

    def predict(self, processed_input):
        return int(self.partition.predict(processed_input)[0])

    def cluster_table(self):
        """Mean raw rating of every feature per cluster"""
        raw = self.bundle["scaler"].inverse_transform(self.partition.centroids)
        table = pd.DataFrame(raw, columns=self.feature_names)
        table.insert(0, "Items", self.partition.sizes)
        table["Mean silhouette"] = self.bundle["silhouette"].cluster_means
        table.index.name = "Cluster"
        return table

    def plot_prediction_location(self, processed_input, prediction):
        """Plot the new item on top of the clustered training items"""
        fig = plot_clusters(self.bundle["X_scaled"], self.partition)
        ax = fig.axes[0]
        if processed_input.shape[1] <= 2:
            ax.scatter(
                processed_input[0, 0],
                processed_input[0, 1] if processed_input.shape[1] == 2 else 0.0,
                c="yellow",
                s=300,
                marker="*",
                edgecolors="black",
                linewidth=2,
                label=f"Your word (Cluster {prediction})",
            )
            ax.legend(bbox_to_anchor=(1.05, 1), loc="upper left")
        return fig


def main():
    st.title("📚 Word Affect Clusters")
    st.markdown("### K-means clusters of word affect ratings")

    predictor = WordClusterPredictor()

    if not predictor.load_models():
        st.error("❌ Could not load the saved analysis.")
        st.info("Run `wordclust <ratings.csv>` first to generate the model file.")
        return

    st.success("✅ Analysis loaded successfully!")

    bundle = predictor.bundle
    st.info(
        f"📊 **{len(bundle['items'])} words** in **{predictor.partition.k} clusters** "
        f"(average silhouette width {bundle['silhouette'].average:.3f})"
    )

    # Diagnostics
    st.header("📈 Cluster Diagnostics")
    col1, col2 = st.columns(2)
    with col1:
        if bundle["gap_curve"] is not None:
            fig = plot_gap_curve(bundle["gap_curve"], chosen_k=bundle["chosen_k"])
            st.pyplot(fig)
            plt.close(fig)
        else:
            st.caption("K was fixed by the user; no gap statistic was computed.")
    with col2:
        fig = plot_silhouette(bundle["silhouette"])
        st.pyplot(fig)
        plt.close(fig)

    st.subheader("📋 Cluster Profiles")
    st.dataframe(predictor.cluster_table(), use_container_width=True)

    with st.expander("Word assignments"):
        st.dataframe(
            bundle["silhouette"].as_frame(item_ids=bundle["items"]),
            use_container_width=True,
        )

    # Input form
    st.header("🔮 Assign a New Word")
    scaler = bundle["scaler"]
    user_input = {}
    columns = st.columns(min(3, len(predictor.feature_names)))
    for i, name in enumerate(predictor.feature_names):
        with columns[i % len(columns)]:
            user_input[name] = st.number_input(
                f"{name}:",
                value=float(scaler.mean_[i]),
                step=0.1,
                help=f"Raw {name} rating of the word",
            )

    if st.button("Assign Cluster", type="primary"):
        try:
            processed_input = predictor.preprocess_input(user_input)
            prediction = predictor.predict(processed_input)

            st.metric(label="Nearest cluster", value=f"Cluster {prediction}")
            same = bundle["items"][predictor.partition.labels == prediction]
            st.caption(f"Example words: {', '.join(map(str, same[:10]))}")

            fig = predictor.plot_prediction_location(processed_input, prediction)
            st.pyplot(fig)
            plt.close(fig)

        except ValueError as e:
            st.error(f"❌ Error during prediction: {str(e)}")


if __name__ == "__main__":
    main()
