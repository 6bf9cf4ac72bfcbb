"""Run-time info printing utilities."""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo
from typing import Optional

from domain_integral.config import InteractionIntegralConfig


def _fmt_float(x: Optional[float], fmt: str = "{:.3g}") -> str:
    if x is None:
        return "n/a"
    return fmt.format(float(x))


def print_run_header(tag: str) -> None:
    # Use a stable timezone so logs are comparable across machines.
    ts = datetime.now(ZoneInfo("Europe/Berlin")).strftime("%Y-%m-%d %H:%M:%S %Z")
    print(f"\n[run] {tag}  start={ts}")


def print_integral_summary(config: InteractionIntegralConfig, crack_front) -> None:
    """One block of ``[interaction]`` / ``[crack-front]`` lines for a run."""
    cfg = config
    ring = f"ring={cfg.ring_index}"
    if cfg.q_function_type == "topology":
        ring += f" (first={cfg.ring_first})"
    print(
        f"[interaction] q={cfg.q_function_type}  {ring}  k_factor={_fmt_float(cfg.k_factor, '{:.4g}')}"
        f"  symmetry={'yes' if cfg.has_symmetry_plane else 'no'}"
        f"  t_stress={'yes' if cfg.t_stress else 'no'}"
    )
    if cfg.t_stress:
        print(f"[interaction] nu={_fmt_float(cfg.poissons_ratio)}")
    print(f"[numba] requested={'yes' if cfg.use_numba else 'no'}")

    p = int(cfg.crack_front_point_index)
    is_2d = bool(crack_front.treat_as_2d())
    print(
        f"[crack-front] points={int(crack_front.n_points)}  point={p}"
        f"  2d={'yes' if is_2d else 'no'}"
    )
    if not is_2d:
        fwd = crack_front.forward_segment_length(p)
        bwd = crack_front.backward_segment_length(p)
        print(
            f"[crack-front] seg_fwd={_fmt_float(fwd, '{:.4g}')}  seg_bwd={_fmt_float(bwd, '{:.4g}')}"
            f"  eps_t={_fmt_float(crack_front.tangential_strain(p), '{:.3e}')}"
        )
