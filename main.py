# main.py
"""
Main entry point for the particle animation viewer.

This script orchestrates the whole run:
1. Loads configuration from `config.json`.
2. Initializes the logging system.
3. Opens the Pygame window and creates the particle engine inside it.
4. Runs the display loop, handing each refresh to the engine's frame driver.
5. Handles clean shutdown.
"""
import logging
from utils import setup_logging, load_config
import cProfile
import pstats
import io

def main():
    """
    The main function to run the viewer.
    """
    # Load configuration from the JSON file first.
    # Logging is not set up yet, so we use a print for this one error.
    try:
        config = load_config('config.json')
    except Exception as e:
        print(f"FATAL: Could not load config.json. Error: {e}")
        return

    setup_logging(config)

    logging.info("--- Particle Fun Time Starting ---")

    run_params = config.get('run_control', {})
    vis_params = config.get('visualization', {})
    # The caller-side options the engine is bound to. Keyboard controls edit
    # this dict and push it through the binding.
    user_options = dict(config.get('particle_options', {}))

    from binding import OptionsBinding
    from constants import FPS, FULLSCREEN, WINDOW_WIDTH, WINDOW_HEIGHT
    from engine import FrameScheduler, ParticleEngine
    from options import ConfigurationError
    from visualization import Visualizer

    # --- Component Initialization ---
    # 1. The visualizer is the engine's container and decides the viewport size.
    visualizer = Visualizer(
        fullscreen=vis_params.get('fullscreen', FULLSCREEN),
        width=vis_params.get('window_width', WINDOW_WIDTH),
        height=vis_params.get('window_height', WINDOW_HEIGHT),
        fps=vis_params.get('fps', FPS),
    )

    # 2. The scheduler stands in for the display refresh callback.
    scheduler = FrameScheduler()
    try:
        engine = ParticleEngine(visualizer, user_options, scheduler=scheduler)
    except ConfigurationError as e:
        logging.critical(f"Invalid particle_options in config.json: {e}")
        visualizer.close()
        return
    binding = OptionsBinding(engine)

    profiler = cProfile.Profile() if run_params.get('profile', False) else None

    log_throttle = run_params.get('log_throttle_steps', 300)
    max_steps = run_params.get('max_steps', 0)  # 0 runs until the window is closed

    running = True
    step_num = 0

    if profiler:
        profiler.enable()
    while running:
        scheduler.run_pending()
        step_num += 1

        # The visualizer handles input and returns False once the user quits.
        try:
            if not visualizer.draw(engine, binding, user_options):
                running = False
        except ConfigurationError as e:
            logging.error(f"Rejected option change: {e}")

        if step_num % log_throttle == 0:
            simulation = engine.simulation
            logging.info(
                f"Refresh {step_num} | {engine.live_count}/{engine.config.max_particles} live | "
                f"frame loop {engine.state.value}"
            )
            logging.debug(
                f"Refresh {step_num} | generated {simulation.generated_total}, "
                f"destroyed {simulation.destroyed_total} since last reset"
            )

        if max_steps and step_num >= max_steps:
            logging.info(f"Reached max_steps ({max_steps}). Stopping.")
            running = False
    if profiler:
        profiler.disable()

    visualizer.close()
    logging.info("Display loop finished.")

    if profiler:
        logging.info("--- Performance Profile ---")
        s = io.StringIO()
        # Sort by cumulative time spent in the function
        stats = pstats.Stats(profiler, stream=s).sort_stats('cumtime')
        stats.print_stats(20)
        logging.info(f"\n{s.getvalue()}")

    logging.info("--- Particle Fun Time Shutting Down ---")


if __name__ == "__main__":
    main()
