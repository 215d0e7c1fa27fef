# Default parameters for the clustering analysis

# K-means
N_STARTS = 25
MAX_ITER = 100
INIT = "k-means++"

# Gap statistic
K_MAX = 10
N_REFS = 50
SELECTION_METHOD = "tibshirani"

RANDOM_SEED = 42

# Driver paths
DATA_PATH = "dataset/word-affect-norms.csv"
LABEL_COLUMN = "Word"
RESULTS_DIR = "dataset/results"
PLOTS_DIR = "dataset/results/plots"
MODELS_DIR = "train/models"
