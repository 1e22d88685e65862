# main.py
"""
Main entry point for the particle fountain simulation.

This script orchestrates the entire simulation lifecycle:
1. Loads configuration from `config.json` (or the path given as argument).
2. Initializes the logging system.
3. Sets up the simulation.
4. Runs the simulation loop headless, at a fixed time step.
5. Reports a performance profile and shuts down.
"""
import cProfile
import io
import logging
import pstats
import sys
import time

import numpy as np

from config import SimulationConfig
from simulation import Simulation
from utils import RunControl, load_config, setup_logging


def main(config_path: str = 'config.json') -> int:
    """
    Runs the simulation. Returns the process exit code.
    """
    # Logging is not set up yet, so we use a print for this one error.
    try:
        config = load_config(config_path)
    except Exception as e:
        print(f"FATAL: Could not load {config_path}. Error: {e}")
        return 1

    setup_logging(config)
    logging.info("--- Particle Fountain Simulation Starting ---")

    try:
        sim_config = SimulationConfig.from_params(config.get('simulation_parameters', {}))
    except ValueError:
        return 1
    run = RunControl.from_params(config.get('run_control', {}))

    sim = Simulation(sim_config)

    profiler = cProfile.Profile()
    started = time.perf_counter()

    profiler.enable()
    for step_num in range(1, run.max_steps + 1):
        sim.step(run.delta_time)

        # Taken once per tick, as a renderer would
        frame = sim.snapshot()

        if step_num % run.log_throttle_steps == 0:
            logging.info(f"Simulation step {step_num}/{run.max_steps} | Particles: {frame.count}")
            if frame.count:
                live = sim.store.live_slots()
                avg_speed = np.mean(np.linalg.norm(sim.store.velocities[live], axis=1))
                logging.debug(f"Step {step_num} | Average speed: {avg_speed:.4f}")
    profiler.disable()

    wall_time = time.perf_counter() - started
    logging.info(
        f"Reached max_steps ({run.max_steps}) in {wall_time:.2f}s "
        f"({run.max_steps / max(wall_time, 1e-9):.1f} steps/s). "
        f"Particles spawned: {sim.spawner.total_spawned}, "
        f"degenerate collision pairs: {sim.degenerate_pairs}."
    )

    logging.info("--- Performance Profile ---")
    s = io.StringIO()
    stats = pstats.Stats(profiler, stream=s).sort_stats('cumtime')
    stats.print_stats(20)
    logging.info(f"\n{s.getvalue()}")

    logging.info("--- Particle Fountain Simulation Shutting Down ---")
    return 0


if __name__ == "__main__":
    sys.exit(main(*sys.argv[1:2]))
