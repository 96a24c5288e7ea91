"""
Pipeline Configuration
----------------------
Column definitions, class labels and hyperparameters shared by every
stage of the churn pipeline. Functions take these as keyword defaults,
so a caller can override any of them per run.
"""

# Columns
ID_COLUMN = 'customerID'
TARGET_COLUMN = 'Churn'

# Class labels. Metrics always treat POSITIVE_CLASS as the positive class,
# independent of how labels happen to sort.
POSITIVE_CLASS = 'Yes'
NEGATIVE_CLASS = 'No'

# Splitting
TRAIN_PROP = 0.8
RANDOM_STATE = 42

# Feature recipe
DISCRETIZE_COLUMN = 'tenure'
DISCRETIZE_BINS = 6
LOG_COLUMN = 'TotalCharges'

# Network
HIDDEN_UNITS = (16, 16)
DROPOUT_RATE = 0.1
INIT_RANGE = 0.05  # uniform weight init in [-INIT_RANGE, INIT_RANGE]
LEARNING_RATE = 0.001
BATCH_SIZE = 50
EPOCHS = 35
VALIDATION_SPLIT = 0.30
THRESHOLD = 0.5

# LIME
KERNEL_WIDTH = 0.5
N_EXPLAIN_FEATURES = 4
N_EXPLAIN_CASES = 10
N_PERMUTATIONS = 5000


class ConfigurationError(ValueError):
    """Raised when input data does not fit the configured pipeline."""
