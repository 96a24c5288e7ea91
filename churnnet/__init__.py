"""
Customer Churn Network - Source Package
"""

from .config import ConfigurationError
from .data_generator import generate_telco_dataset
from .preprocessing import load_data, clean_data, split_data, encode_target
from .recipe import Recipe, build_churn_recipe
from .model_training import ChurnNet, ChurnModelTrainer
from .evaluation import evaluate_predictions
from .explainer import ChurnExplainer, model_type, predict_probabilities, feature_importance
from .correlation import correlation_table
