from .plot_tour import plot_tour, plot_tours
