from .plots import plot_impulse_responses, plot_scenarios

__all__ = ["plot_impulse_responses", "plot_scenarios"]
