from __future__ import annotations

import time

from repl_console.config import Config
from repl_console.debug_log import DebugLogger
from repl_console.evaluator import Evaluator
from repl_console.session import SessionController
from repl_console.surface import TextSurface
from repl_console.ui import ConsoleUI


def build_session(config: Config, logger: DebugLogger | None = None) -> SessionController:
    """Create a surface, evaluator and controller for one console session.

    Startup hooks run before the first prompt; their output becomes part of
    the transcript.
    """
    config.validate()
    surface = TextSurface()
    controller = SessionController(
        surface,
        Evaluator(),
        config.history.length,
        match=config.history.match,
        primary_prompt=config.prompts.primary,
        continuation_prompt=config.prompts.continuation,
        logger=logger,
    )
    if config.banner:
        surface.append(config.banner.rstrip("\n") + "\n")
    startup_output = controller.run_statements(config.hooks.startup)
    if startup_output:
        surface.append(startup_output if startup_output.endswith("\n") else startup_output + "\n")
    controller.start()
    return controller


def shutdown_session(controller: SessionController, config: Config):
    """Run exit hooks and release the evaluator."""
    controller.run_statements(config.hooks.on_exit)
    controller.close()


def run_console(stdscr, config: Config, color: bool = True, debug: bool = False):
    logger = DebugLogger()
    if debug:
        logger.start()

    controller = build_session(config, logger)
    ui = ConsoleUI(stdscr, controller, debug_logger=logger, config=config, color=color)
    ui.draw()

    try:
        while True:
            # Ctrl+C arrives as KeyboardInterrupt in cbreak mode
            try:
                if ui.handle_key(ui.stdscr.getch()):
                    break
            except KeyboardInterrupt:
                controller.interrupt()
            ui.draw()
    except Exception as e:
        # Try to show error briefly
        ui.status = f"Fatal error: {e}"
        ui.draw()
        time.sleep(2)
        raise
    finally:
        shutdown_session(controller, config)
        logger.stop()
