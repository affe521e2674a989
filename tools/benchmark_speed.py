"""
Performance Benchmark
=====================

Measures headless environment throughput and resolve-cycle cost.

Usage:
    python -m tools.benchmark_speed [--steps S] [--drops D] [--quick]
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
import numpy as np

from isotopic.isotope_core.config_loader import load_config
from isotopic.isotope_core.env_gym import IsotopicEnv
from isotopic.isotope_core.game import IsotopicGame


def benchmark_single_env(
    num_steps: int = 1000,
    seed: int = 42
) -> dict:
    """
    Benchmark single environment performance with random actions.

    Args:
        num_steps: Number of steps to run.
        seed: Random seed.

    Returns:
        Dict with timing results.
    """
    env = IsotopicEnv()
    rng = np.random.default_rng(seed)
    num_actions = env.action_space.n

    # Warmup
    env.reset(seed=seed)
    for _ in range(10):
        _, _, terminated, truncated, _ = env.step(int(rng.integers(num_actions)))
        if terminated or truncated:
            env.reset()

    # Benchmark
    env.reset(seed=seed)
    episodes = 0
    start = time.perf_counter()

    for _ in range(num_steps):
        _, _, terminated, truncated, _ = env.step(int(rng.integers(num_actions)))
        if terminated or truncated:
            episodes += 1
            env.reset()

    elapsed = time.perf_counter() - start
    env.close()

    return {
        "mode": "env",
        "num_steps": num_steps,
        "episodes": episodes,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
        "ms_per_step": (elapsed * 1000) / num_steps
    }


def benchmark_core_game(
    num_steps: int = 1000,
    seed: int = 42
) -> dict:
    """
    Benchmark raw IsotopicGame without Gym overhead.

    Each step applies one random input and advances one frame.
    """
    config = load_config()
    game = IsotopicGame(config=config, seed=seed)
    rng = np.random.default_rng(seed)
    frame = config.observation.frame_seconds
    inputs = (
        game.move_left, game.move_right, game.soft_drop,
        game.rotate_cw, game.rotate_ccw, game.hard_drop, game.hold,
    )

    start = time.perf_counter()
    for _ in range(num_steps):
        inputs[int(rng.integers(len(inputs)))]()
        game.advance(frame)
        if game.is_over:
            game.restart()

    elapsed = time.perf_counter() - start
    game.close()

    return {
        "mode": "core_game",
        "num_steps": num_steps,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
        "ms_per_step": (elapsed * 1000) / num_steps
    }


def benchmark_resolve(
    num_drops: int = 500,
    seed: int = 42
) -> dict:
    """
    Benchmark lock + resolve cycles by hard-dropping at random columns.

    Returns:
        Dict with timing results and totals of the work the cycles did.
    """
    config = load_config()
    game = IsotopicGame(config=config, seed=seed)
    rng = np.random.default_rng(seed)

    fusion_events = 0
    lines = 0
    iterations = 0
    start = time.perf_counter()

    for _ in range(num_drops):
        shift = int(rng.integers(-5, 6))
        for _ in range(abs(shift)):
            if shift < 0:
                game.move_left()
            else:
                game.move_right()
        game.hard_drop()

        report = game.last_resolve
        if report is not None:
            fusion_events += len(report.fusion_events)
            lines += report.lines_cleared
            iterations += report.iterations

        if game.is_over:
            game.restart()

    elapsed = time.perf_counter() - start
    game.close()

    return {
        "mode": "resolve",
        "num_steps": num_drops,
        "fusion_events": fusion_events,
        "lines": lines,
        "iterations": iterations,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_drops / elapsed,
        "ms_per_step": (elapsed * 1000) / num_drops
    }


def run_all_benchmarks(steps: int = 500, drops: int = 500) -> list:
    """Run comprehensive benchmarks."""
    results = []

    print("=" * 60)
    print("ISOTOPIC TETRIS PERFORMANCE BENCHMARK")
    print("=" * 60)
    print()

    print("Benchmarking IsotopicGame (raw)...")
    result = benchmark_core_game(num_steps=steps)
    results.append(result)
    print(f"  Steps/sec: {result['steps_per_second']:.1f}")
    print(f"  ms/step:   {result['ms_per_step']:.3f}")
    print()

    print("Benchmarking IsotopicEnv...")
    result = benchmark_single_env(num_steps=steps)
    results.append(result)
    print(f"  Steps/sec: {result['steps_per_second']:.1f}")
    print(f"  ms/step:   {result['ms_per_step']:.3f}")
    print(f"  Episodes:  {result['episodes']}")
    print()

    print("Benchmarking resolve cycles (hard drops)...")
    result = benchmark_resolve(num_drops=drops)
    results.append(result)
    print(f"  Drops/sec:     {result['steps_per_second']:.1f}")
    print(f"  ms/drop:       {result['ms_per_step']:.3f}")
    print(f"  Fusion events: {result['fusion_events']}")
    print(f"  Lines:         {result['lines']}")
    print()

    print("=" * 60)
    print("SUMMARY")
    print("=" * 60)
    print()
    print(f"{'Mode':<20} {'Steps/s':>12} {'ms/step':>10}")
    print("-" * 44)

    for r in results:
        print(f"{r['mode']:<20} {r['steps_per_second']:>12.1f} {r['ms_per_step']:>10.3f}")

    return results


def main():
    parser = argparse.ArgumentParser(description="Benchmark Isotopic Tetris performance")
    parser.add_argument("--steps", type=int, default=500, help="Steps per benchmark")
    parser.add_argument("--drops", type=int, default=500, help="Hard drops for the resolve benchmark")
    parser.add_argument("--quick", action="store_true", help="Quick benchmark (fewer steps)")
    parser.add_argument("--verbose", action="store_true", help="Show engine debug logging")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )

    steps = 100 if args.quick else args.steps
    drops = 100 if args.quick else args.drops

    run_all_benchmarks(steps=steps, drops=drops)

    return 0


if __name__ == "__main__":
    sys.exit(main())
