from typing import Dict, Optional, Sequence

import matplotlib.pyplot as plt
import pandas as pd


def plot_impulse_responses(df: pd.DataFrame, variables: Optional[Sequence[str]] = None,
                           title: str = "Impulse Responses", save_path: Optional[str] = None):
    """One panel per variable of an impulse-response DataFrame."""
    variables = list(variables) if variables is not None else list(df.columns)
    fig, ax = plt.subplots(1, len(variables), figsize=(5 * len(variables), 4), squeeze=False)

    for a, var in zip(ax[0], variables):
        a.plot(df.index, df[var], color='#1f77b4', lw=2)
        a.set_title(var)
        a.grid(True, alpha=0.3)
        a.axhline(0, color='k', ls=':', lw=1)
        a.set_xlabel("Quarters")

    fig.suptitle(title, fontsize=14)
    fig.tight_layout()
    if save_path:
        fig.savefig(save_path)
        print(f"Impulse response plot saved to {save_path}")
    return fig


def plot_scenarios(scenarios: Dict[str, pd.DataFrame], variable: str,
                   title: Optional[str] = None, save_path: Optional[str] = None):
    """Overlay the response of one variable across scenarios."""
    fig, ax = plt.subplots(figsize=(8, 5))
    for label, df in scenarios.items():
        ax.plot(df.index, df[variable], lw=2, label=label)

    ax.axhline(0, color='k', ls=':', lw=1)
    ax.set_title(title or variable)
    ax.set_xlabel("Quarters")
    ax.legend()
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    if save_path:
        fig.savefig(save_path)
        print(f"Scenario plot saved to {save_path}")
    return fig
