"""
Visualization utilities for the venation network.
"""

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.collections import LineCollection, PatchCollection
from matplotlib.patches import Circle, Polygon as PolygonPatch
from matplotlib.animation import FuncAnimation
from typing import Optional, Sequence, Tuple
from pathlib import Path

from .geometry import Polygon
from .network import GrowthNetwork
from .simulation import Simulation


def _frame_axes(ax, boundary: Polygon, margin: float = 20.0):
    min_x, min_y, max_x, max_y = boundary.bounding_box
    ax.set_xlim(min_x - margin, max_x + margin)
    ax.set_ylim(max_y + margin, min_y - margin)  # screen coordinates, y down
    ax.set_aspect('equal')
    ax.axis('off')


def _draw_outlines(ax, boundary: Polygon, obstacles: Sequence[Polygon], show_bounds: bool, show_obstacles: bool):
    if show_bounds:
        ax.add_patch(PolygonPatch(boundary.points, closed=True, fill=False,
                                  edgecolor='black', linewidth=1.0, alpha=0.4))
    if show_obstacles:
        for obstacle in obstacles:
            ax.add_patch(PolygonPatch(obstacle.points, closed=True, facecolor='lightgray',
                                      edgecolor='gray', linewidth=1.0, alpha=0.6))


def _source_positions(network: GrowthNetwork) -> np.ndarray:
    return np.array([s.position.to_tuple() for s in network.sources]).reshape(-1, 2)


def visualize_network(
    network: GrowthNetwork,
    show_sources: bool = True,
    show_attraction_zones: bool = False,
    show_bounds: bool = True,
    show_obstacles: bool = True,
    vein_color: str = 'darkgreen',
    vein_width: float = 1.0,
    source_color: str = 'black',
    source_size: float = 2.0,
    figsize: Tuple[int, int] = (12, 12),
    save_path: Optional[str] = None,
    show: bool = True,
):
    """Draw veins as node -> parent segments, plus sources and scene outlines."""
    fig, ax = plt.subplots(figsize=figsize)

    _draw_outlines(ax, network.boundary, network.obstacles, show_bounds, show_obstacles)

    segments = network.segments()
    if segments:
        ax.add_collection(LineCollection(segments, colors=vein_color, linewidths=vein_width))

    positions = _source_positions(network)
    if show_attraction_zones and len(positions) > 0:
        zones = [Circle(p, s.influence_radius) for p, s in zip(positions, network.sources)]
        ax.add_collection(PatchCollection(zones, facecolor='red', edgecolor='none', alpha=0.02))

    if show_sources and len(positions) > 0:
        ax.scatter(positions[:, 0], positions[:, 1], c=source_color, s=source_size, alpha=0.2)

    roots = np.array([n.position.to_tuple() for n in network.roots]).reshape(-1, 2)
    if len(roots) > 0:
        ax.scatter(roots[:, 0], roots[:, 1], c=vein_color, s=12)

    _frame_axes(ax, network.boundary)
    ax.set_title(f'Iteration {network.iteration} ({network.status.value})')

    plt.tight_layout()

    if save_path:
        Path(save_path).parent.mkdir(parents=True, exist_ok=True)
        plt.savefig(save_path, dpi=150, bbox_inches='tight',
                    facecolor='white', edgecolor='none')
        print(f"Saved visualization to {save_path}")

    if show:
        plt.show()
    return fig, ax


def animate_growth(
    simulation: Simulation,
    max_frames: Optional[int] = None,
    interval: int = 50,
    frame_skip: int = 1,
    vein_color: str = 'darkgreen',
    vein_width: float = 1.0,
    figsize: Tuple[int, int] = (12, 12),
    save_path: Optional[str] = None,
    show: bool = True,
) -> FuncAnimation:
    """
    Tick the simulation until it reaches a fixed point (or `max_frames`),
    recording every `frame_skip`-th frame, then animate the recording.
    """
    network = simulation.network
    max_frames = max_frames or simulation.config.max_iterations

    fig, ax = plt.subplots(figsize=figsize)
    _draw_outlines(ax, network.boundary, network.obstacles,
                   simulation.show_bounds, simulation.show_obstacles)
    _frame_axes(ax, network.boundary)

    vein_collection = LineCollection([], colors=vein_color, linewidths=vein_width)
    ax.add_collection(vein_collection)
    source_scatter = ax.scatter([], [], c='black', s=2, alpha=0.2)
    title = ax.set_title('Iteration: 0')

    frames_data = []

    def collect_frame():
        frames_data.append({
            'segments': network.segments(),
            'sources': _source_positions(network),
            'iteration': network.iteration,
        })

    collect_frame()
    while simulation.frame < max_frames:
        result = simulation.tick()
        if simulation.frame % frame_skip == 0:
            collect_frame()
        if not result.changed:
            break
    collect_frame()

    print(f"Collected {len(frames_data)} frames for animation")

    def update(frame_idx):
        data = frames_data[frame_idx]
        vein_collection.set_segments(data['segments'])
        source_scatter.set_offsets(data['sources'] if len(data['sources']) else np.empty((0, 2)))
        title.set_text(f"Iteration: {data['iteration']}")
        return [vein_collection, source_scatter]

    anim = FuncAnimation(
        fig, update,
        frames=len(frames_data),
        interval=interval,
        blit=False,
        repeat=True
    )

    if save_path:
        Path(save_path).parent.mkdir(parents=True, exist_ok=True)
        print(f"Saving animation ({len(frames_data)} frames)...")
        anim.save(save_path, writer='pillow', fps=20)
        print(f"Saved animation to {save_path}")

    if show:
        plt.show()
    return anim


def plot_growth_statistics(network: GrowthNetwork, save_path: Optional[str] = None, show: bool = True):
    """Plot node depth and branching statistics of the grown network."""
    fig, axes = plt.subplots(1, 2, figsize=(12, 5))

    depths = network.depths()
    max_depth = int(depths.max()) if len(depths) else 0
    axes[0].bar(range(max_depth + 1), np.bincount(depths, minlength=max_depth + 1),
                color='forestgreen', edgecolor='black')
    axes[0].set_xlabel('Depth')
    axes[0].set_ylabel('Node Count')
    axes[0].set_title('Nodes per Depth Level')

    children = np.zeros(len(network.nodes), dtype=int)
    for node in network.nodes:
        if node.parent is not None:
            children[node.parent] += 1
    max_children = int(children.max()) if len(children) else 0
    axes[1].bar(range(max_children + 1), np.bincount(children, minlength=max_children + 1),
                color='saddlebrown', edgecolor='black')
    axes[1].set_xlabel('Children')
    axes[1].set_ylabel('Node Count')
    axes[1].set_title('Branching Distribution')

    plt.tight_layout()

    if save_path:
        Path(save_path).parent.mkdir(parents=True, exist_ok=True)
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        print(f"Saved statistics to {save_path}")

    if show:
        plt.show()
    return fig, axes
