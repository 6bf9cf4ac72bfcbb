"""Tabulate and plot interaction-integral values over points and rings."""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Iterable, Optional

import numpy as np
import pandas as pd

from domain_integral.config import InteractionIntegralConfig
from domain_integral.fem.mesh import ElementQuadrature, Mesh, element_quadrature
from domain_integral.fields import QuadratureFields
from domain_integral.interaction_integral import InteractionIntegral


def evaluate_rings(
    mesh: Mesh,
    crack_front,
    fields_for_point: Callable[[int], QuadratureFields],
    base_config: InteractionIntegralConfig,
    rings: Iterable[int],
    points: Optional[Iterable[int]] = None,
    quadrature: Optional[ElementQuadrature] = None,
    comm=None,
) -> pd.DataFrame:
    """Evaluate every (point, ring) pair into a table.

    ``fields_for_point(point)`` supplies the quadrature fields for a point
    (the auxiliary fields depend on the local crack-front frame).
    """
    quad = quadrature if quadrature is not None else element_quadrature(mesh)
    if points is None:
        points = range(int(crack_front.n_points))
    rings = [int(r) for r in rings]

    rows = []
    for point in points:
        fields = fields_for_point(int(point))
        for ring in rings:
            cfg = replace(base_config, crack_front_point_index=int(point), ring_index=ring)
            value = InteractionIntegral(mesh, fields, crack_front, cfg, quadrature=quad).evaluate(comm=comm)
            rows.append(
                {
                    "point": int(point),
                    "ring": ring,
                    "q_function_type": cfg.q_function_type,
                    "value": float(value),
                }
            )
    return pd.DataFrame(rows, columns=["point", "ring", "q_function_type", "value"])


def ring_convergence(df: pd.DataFrame) -> pd.DataFrame:
    """Add ``rel_change``: relative change from the previous ring per point."""
    out = df.sort_values(["point", "ring"]).reset_index(drop=True).copy()
    prev = out.groupby("point")["value"].shift(1)
    denom = out["value"].abs().where(out["value"].abs() > 0.0, np.nan)
    out["rel_change"] = (out["value"] - prev).abs() / denom
    return out


def plot_along_front(df: pd.DataFrame, ax=None, ylabel: str = "K"):
    """One line per ring: value against crack-front point index."""
    import matplotlib.pyplot as plt

    if ax is None:
        _, ax = plt.subplots(figsize=(6.0, 4.0))
    for ring, grp in df.sort_values("point").groupby("ring"):
        ax.plot(grp["point"].to_numpy(), grp["value"].to_numpy(), marker="o", label=f"ring {ring}")
    ax.set_xlabel("crack-front point")
    ax.set_ylabel(ylabel)
    ax.grid(True, alpha=0.3)
    ax.legend()
    return ax
