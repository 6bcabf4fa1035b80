"""Count scheduler ticks on selected CPUs with ftrace."""

__version__ = "0.1.0"
