"""
Export a network snapshot to a renderer-friendly JSON file.
Keeps external renderers decoupled from simulation code.
"""

import json
from pathlib import Path
from typing import Any, Dict

from .network import GrowthNetwork


def export_network_data(network: GrowthNetwork, output_path: str) -> Dict[str, Any]:
    """
    Export the network to JSON.

    Format:
    {
        "iteration": int,
        "status": "growing" | "stalled" | "exhausted",
        "boundary": [[x, y], ...],
        "obstacles": [[[x, y], ...], ...],
        "nodes": [
            {
                "position": [x, y],
                "parent": int | null,   # index into "nodes"
                "depth": int,
                "is_tip": bool
            }
        ],
        "sources": [{"position": [x, y]}]
    }
    """
    depths = network.depths()

    nodes_data = [
        {
            "position": [node.position.x, node.position.y],
            "parent": node.parent,
            "depth": int(depths[node.index]),
            "is_tip": network.is_tip(node),
        }
        for node in network.nodes
    ]

    data = {
        "iteration": network.iteration,
        "status": network.status.value,
        "boundary": network.boundary.points.tolist(),
        "obstacles": [o.points.tolist() for o in network.obstacles],
        "nodes": nodes_data,
        "sources": [{"position": [s.position.x, s.position.y]} for s in network.sources],
    }

    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w') as f:
        json.dump(data, f, indent=2)

    return data


def load_network_data(path: str) -> Dict[str, Any]:
    with open(path, 'r') as f:
        return json.load(f)
