"""
Churn Network Training Pipeline
===============================
End-to-end script to train, evaluate and explain the churn network.

Run this script to:
1. Load (or generate) customer data
2. Clean it and split 80/20
3. Prep the feature recipe on train and bake train/test
4. Train the feed-forward network
5. Predict and evaluate on the test set
6. Explain test predictions with LIME and cross-check with correlations

Usage:
    python train_pipeline.py
    python train_pipeline.py --data path/to/your/data.csv --plots plots/
"""

import os
import argparse
import logging
from datetime import datetime

from churnnet.config import (
    TARGET_COLUMN, POSITIVE_CLASS, RANDOM_STATE, TRAIN_PROP, EPOCHS, THRESHOLD,
    N_EXPLAIN_CASES
)
from churnnet.data_generator import generate_telco_dataset
from churnnet.preprocessing import load_data, clean_data, split_data, encode_target
from churnnet.recipe import build_churn_recipe
from churnnet.model_training import ChurnModelTrainer
from churnnet.explainer import ChurnExplainer, feature_importance, summarize_explanation
from churnnet.correlation import correlation_table
from churnnet import plotting

logger = logging.getLogger('train_pipeline')


def _banner(title):
    logger.info("=" * 70)
    logger.info(title)
    logger.info("=" * 70)


def run_pipeline(data_path=None, n_samples=7043, random_state=RANDOM_STATE,
                 model_seed=None, n_explain=N_EXPLAIN_CASES, epochs=EPOCHS,
                 plot_dir=None, df=None):
    """
    Execute the complete pipeline.

    Parameters:
    -----------
    data_path : str, optional
        Path to CSV file with customer data. If None, synthetic data is used.
    n_samples : int
        Size of the synthetic dataset when no data is given
    random_state : int
        Seed for data generation and the train/test split
    model_seed : int, optional
        Seed for network initialization and batch shuffling (unseeded if None)
    n_explain : int
        Number of leading test rows to explain with LIME
    epochs : int
        Training passes over the data
    plot_dir : str, optional
        Directory to write plots to; no plots are drawn if None
    df : pd.DataFrame, optional
        Raw records to use instead of reading `data_path`

    Returns:
    --------
    dict with the recipe, trainer, baked matrices, predictions, metrics,
    explanations, feature importance and correlation table
    """
    _banner("CUSTOMER CHURN NETWORK - TRAINING PIPELINE")
    logger.info(f"Started at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    # =========================================================================
    # STEP 1: Load and clean data
    # =========================================================================
    _banner("STEP 1: DATA LOADING & CLEANING")
    if df is None:
        if data_path:
            df = load_data(data_path)
        else:
            logger.info("Generating synthetic Telco customer data...")
            df = generate_telco_dataset(n_samples=n_samples, random_state=random_state)

    cleaned = clean_data(df)
    logger.info(f"Clean dataset shape: {cleaned.shape}")
    logger.info(f"Churn rate: {(cleaned[TARGET_COLUMN] == POSITIVE_CLASS).mean():.1%}")

    # =========================================================================
    # STEP 2: Split
    # =========================================================================
    _banner("STEP 2: TRAIN/TEST SPLIT")
    train_df, test_df = split_data(cleaned, prop=TRAIN_PROP, random_state=random_state)

    # =========================================================================
    # STEP 3: Feature recipe
    # =========================================================================
    _banner("STEP 3: FEATURE RECIPE")
    recipe = build_churn_recipe().prep(train_df)
    X_train = recipe.bake(train_df)
    X_test = recipe.bake(test_df)
    y_train = encode_target(train_df[TARGET_COLUMN])
    y_test = encode_target(test_df[TARGET_COLUMN])
    logger.info(f"Feature matrix shape: train {X_train.shape}, test {X_test.shape}")

    # =========================================================================
    # STEP 4: Train network
    # =========================================================================
    _banner("STEP 4: MODEL TRAINING")
    trainer = ChurnModelTrainer(epochs=epochs, random_state=model_seed)
    trainer.train_network(X_train, y_train)

    # =========================================================================
    # STEP 5: Predict & evaluate
    # =========================================================================
    _banner("STEP 5: MODEL EVALUATION")
    y_proba = trainer.predict_proba(X_test)
    y_pred = trainer.classify(X_test, threshold=THRESHOLD)
    metrics = trainer.evaluate_model(X_test, y_test, threshold=THRESHOLD)

    # =========================================================================
    # STEP 6: Explanations
    # =========================================================================
    _banner("STEP 6: LIME EXPLANATIONS & CORRELATION CHECK")
    explainer = ChurnExplainer(trainer, X_train, random_state=random_state)
    explanations = explainer.explain(X_test.iloc[:n_explain])
    importance = feature_importance(explanations)
    for case in explanations['case'].unique()[:3]:
        logger.info(summarize_explanation(explanations, case))

    correlations = correlation_table(X_train, y_train)
    logger.info("Strongest correlations with churn:")
    for row in correlations.head(10).itertuples():
        logger.info(f"  {row.feature:<40} {row.correlation:+.3f}")

    if plot_dir:
        os.makedirs(plot_dir, exist_ok=True)
        plotting.plot_training_history(trainer.history, os.path.join(plot_dir, 'training_history.png'))
        plotting.plot_feature_importance(importance, os.path.join(plot_dir, 'feature_importance.png'))
        plotting.plot_correlations(correlations, os.path.join(plot_dir, 'correlations.png'))

    # =========================================================================
    # SUMMARY
    # =========================================================================
    _banner("PIPELINE COMPLETE - SUMMARY")
    logger.info(f"Accuracy:  {metrics['accuracy']:.3f}")
    logger.info(f"ROC-AUC:   {metrics['roc_auc']:.3f}")
    logger.info(f"Precision: {metrics['precision']:.3f}")
    logger.info(f"Recall:    {metrics['recall']:.3f}")
    logger.info(f"F1-Score:  {metrics['f1_score']:.3f}")

    return {
        'cleaned': cleaned,
        'train': train_df,
        'test': test_df,
        'recipe': recipe,
        'X_train': X_train,
        'X_test': X_test,
        'y_train': y_train,
        'y_test': y_test,
        'trainer': trainer,
        'y_proba': y_proba,
        'y_pred': y_pred,
        'metrics': metrics,
        'explanations': explanations,
        'feature_importance': importance,
        'correlations': correlations,
    }


def main(argv=None):
    parser = argparse.ArgumentParser(description='Train and explain the churn network')
    parser.add_argument('--data', type=str, default=None,
                        help='Path to customer data CSV (optional)')
    parser.add_argument('--samples', type=int, default=7043,
                        help='Synthetic dataset size when --data is not given')
    parser.add_argument('--seed', type=int, default=RANDOM_STATE,
                        help='Seed for data generation and the train/test split')
    parser.add_argument('--model-seed', type=int, default=None,
                        help='Seed for network training (unseeded by default)')
    parser.add_argument('--explain', type=int, default=N_EXPLAIN_CASES,
                        help='Number of test rows to explain')
    parser.add_argument('--plots', type=str, default=None,
                        help='Directory for plots (optional)')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s | %(levelname)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    run_pipeline(
        data_path=args.data,
        n_samples=args.samples,
        random_state=args.seed,
        model_seed=args.model_seed,
        n_explain=args.explain,
        plot_dir=args.plots
    )


if __name__ == '__main__':
    main()
