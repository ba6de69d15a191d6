from allocheck.visualizer.plot import balance_frame, plot_phase_balance

__all__ = ["balance_frame", "plot_phase_balance"]
