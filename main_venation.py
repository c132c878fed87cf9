"""
Main entry point for the venation simulation.

Grows an open venation network inside the configured boundary shape and
saves the result. Configuration is loaded from config/venation.json when
present (pass another path as the first argument), defaults otherwise.

Outputs:
- Network render data (.json)
- Final network visualization (.png) or growth animation (.gif)
- Growth statistics (.png)
"""

import sys
from pathlib import Path

from venation import Simulation, load_config
from venation.exporters import export_network_data
from venation.visualization import visualize_network, animate_growth, plot_growth_statistics


def main():
    config_path = sys.argv[1] if len(sys.argv) > 1 else 'config/venation.json'
    config = load_config(config_path)

    Path(config.output_dir).mkdir(parents=True, exist_ok=True)

    simulation = Simulation(config)

    if config.animate:
        animate_growth(
            simulation,
            frame_skip=config.frame_skip,
            save_path=str(config.animation_path),
        )
    else:
        simulation.network.grow(
            max_iterations=config.max_iterations,
            stagnation_limit=config.stagnation_limit,
        )
        visualize_network(
            simulation.network,
            show_sources=config.show_sources,
            show_attraction_zones=config.show_attraction_zones,
            show_bounds=simulation.show_bounds,
            show_obstacles=simulation.show_obstacles,
            save_path=str(config.network_image_path),
        )

    network = simulation.network
    export_network_data(network, str(config.network_data_path))
    print(f"Exported render data to: {config.network_data_path}")

    plot_growth_statistics(network, save_path=str(config.stats_path))

    print(f"\nGrew {len(network.nodes)} nodes in {network.iteration} iterations "
          f"({network.status.value}, {len(network.sources)} sources left)")


if __name__ == '__main__':
    main()
