"""Static PNG output: terrain maps and run charts."""

from __future__ import annotations

import os

import matplotlib.pyplot as plt
import numpy as np


def save_terrain_image(terrain_map: "TerrainMap", filepath: str, scale: int = 8,  # noqa: F821
                       highlight_resources: bool = False) -> None:
    """Write the biome map as a PNG, each cell blown up to *scale* pixels."""
    os.makedirs(os.path.dirname(filepath) if os.path.dirname(filepath) else ".", exist_ok=True)
    image = terrain_map.to_rgb(highlight_resources=highlight_resources)
    if scale > 1:
        image = np.kron(image, np.ones((scale, scale, 1), dtype=np.uint8))
    plt.imsave(filepath, image)


def save_field_images(terrain_map: "TerrainMap", output_dir: str) -> list[str]:  # noqa: F821
    """Height, temperature and moisture heatmaps side by side."""
    os.makedirs(output_dir, exist_ok=True)
    fig, axes = plt.subplots(1, 3, figsize=(15, 5))
    panels = [
        ("Height", terrain_map.height, "terrain"),
        ("Temperature", terrain_map.temperature, "coolwarm"),
        ("Moisture", terrain_map.moisture, "YlGnBu"),
    ]
    for ax, (title, data, cmap) in zip(axes, panels):
        ax.set_title(title)
        if data is not None:
            im = ax.imshow(data, cmap=cmap, interpolation="nearest")
            fig.colorbar(im, ax=ax, fraction=0.046)
        ax.set_axis_off()
    fig.suptitle(f"Terrain fields (seed {terrain_map.seed}, {terrain_map.shape.value})")
    plt.tight_layout()
    path = os.path.join(output_dir, "terrain_fields.png")
    fig.savefig(path, dpi=100)
    plt.close(fig)
    return [path]


def save_metrics_charts(metrics: "MetricsCollector", output_dir: str) -> list[str]:  # noqa: F821
    """Save population and automaton charts for a finished run."""
    os.makedirs(output_dir, exist_ok=True)
    snapshots = metrics.snapshots
    if not snapshots:
        return []

    ticks = [s.tick for s in snapshots]
    saved: list[str] = []

    fig, ax = plt.subplots(figsize=(10, 5))
    ax.set_title("Population")
    ax.plot(ticks, [s.population for s in snapshots], "b-", linewidth=1.5, label="Total")
    tribe_ids = sorted({tid for s in snapshots for tid in s.tribe_population})
    for tid in tribe_ids:
        ax.plot(ticks, [s.tribe_population.get(tid, 0) for s in snapshots],
                linewidth=1.0, label=f"Tribe {tid}")
    ax.set_xlabel("Tick")
    ax.legend(fontsize=8)
    ax.grid(True, alpha=0.3)
    path = os.path.join(output_dir, "population.png")
    fig.savefig(path, dpi=100)
    plt.close(fig)
    saved.append(path)

    if any(s.live_cells for s in snapshots):
        fig, axes = plt.subplots(1, 2, figsize=(14, 5))
        axes[0].set_title("Genome Diversity")
        axes[0].plot(ticks, [s.distinct_genomes for s in snapshots], "m-", linewidth=1.5)
        axes[0].set_xlabel("Tick")
        axes[0].grid(True, alpha=0.3)
        axes[1].set_title("Colonies")
        axes[1].plot(ticks, [s.colony_count for s in snapshots], "g-", linewidth=1.5, label="Count")
        axes[1].plot(ticks, [s.largest_colony for s in snapshots], "r--", linewidth=1.0, label="Largest")
        axes[1].set_xlabel("Tick")
        axes[1].legend(fontsize=8)
        axes[1].grid(True, alpha=0.3)
        plt.tight_layout()
        path = os.path.join(output_dir, "automaton.png")
        fig.savefig(path, dpi=100)
        plt.close(fig)
        saved.append(path)

    return saved
