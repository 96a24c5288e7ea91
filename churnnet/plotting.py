"""
Plots
-----
Downstream consumers of the ranked tables: training history, LIME
feature importance and the correlation lollipop chart.
"""

import logging
from typing import Dict, List, Optional

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
import matplotlib.pyplot as plt
import pandas as pd

logger = logging.getLogger(__name__)


def _finish(fig, save_path: Optional[str]) -> None:
    fig.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info(f"Plot saved to {save_path}")
    plt.close(fig)


def plot_training_history(history: Dict[str, List[float]], save_path: Optional[str] = None) -> None:
    """Loss and accuracy per epoch, training vs validation."""
    fig, axes = plt.subplots(2, 1, figsize=(8, 7), sharex=True)
    epochs = range(1, len(history['loss']) + 1)

    for ax, metric in zip(axes, ('loss', 'acc')):
        ax.plot(epochs, history[metric], marker='o', markersize=3, label='training')
        if history.get(f'val_{metric}'):
            ax.plot(epochs, history[f'val_{metric}'], marker='o', markersize=3, label='validation')
        ax.set_ylabel(metric)
        ax.legend(loc='best')
    axes[-1].set_xlabel('epoch')
    axes[0].set_title('Training History', fontsize=14, fontweight='bold')

    _finish(fig, save_path)


def plot_feature_importance(importance: pd.DataFrame, save_path: Optional[str] = None,
                            top_n: int = 15) -> None:
    """Bar chart of mean absolute LIME weight per feature."""
    df = importance.head(top_n)

    fig, ax = plt.subplots(figsize=(10, 8))
    colors = ['#e74c3c' if w > 0 else '#27ae60' for w in df['mean_weight'][::-1]]
    bars = ax.barh(df['feature'][::-1], df['importance_pct'][::-1], color=colors)

    ax.set_xlabel('Share of LIME weight (%)', fontsize=12)
    ax.set_title('Top Features in Local Explanations', fontsize=14, fontweight='bold')
    for bar, val in zip(bars, df['importance_pct'][::-1]):
        ax.text(bar.get_width() + 0.3, bar.get_y() + bar.get_height() / 2,
                f'{val:.1f}%', va='center', fontsize=10)

    _finish(fig, save_path)


def plot_correlations(correlations: pd.DataFrame, save_path: Optional[str] = None) -> None:
    """Lollipop chart of feature/target correlations, strongest at the top."""
    df = correlations.dropna(subset=['correlation']).iloc[::-1]

    fig, ax = plt.subplots(figsize=(9, max(4, 0.3 * len(df))))
    colors = ['#e74c3c' if c > 0 else '#3498db' for c in df['correlation']]
    ax.hlines(df['feature'], 0, df['correlation'], color=colors, linewidth=1.5)
    ax.scatter(df['correlation'], df['feature'], color=colors, s=40, zorder=3)
    ax.axvline(x=0, color='black', linewidth=0.5)

    ax.set_xlabel('Correlation with Churn', fontsize=12)
    ax.set_title('Churn Correlation Analysis', fontsize=14, fontweight='bold')

    _finish(fig, save_path)
