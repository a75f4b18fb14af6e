import argparse
import asyncio
import logging
import sys

from path_tracker.configs import AppSettings
from path_tracker.factories import create_tracking_app
from path_tracker.platforms import DummyPlatform
from path_tracker.ui import ConsoleMapView


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Path Tracker (simulated platform)")
    parser.add_argument(
        "--duration",
        type=float,
        default=15.0,
        help="Seconds to keep the session running after pressing start."
    )
    parser.add_argument(
        "--disable-location-after",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Simulate the user switching location off this many seconds into the session."
    )
    parser.add_argument(
        "--deny",
        action="store_true",
        help="Simulate the user refusing the location permission."
    )
    parser.add_argument(
        "--cycles",
        type=int,
        default=1,
        help="Number of start/stop cycles to run."
    )
    parser.add_argument(
        "--keep-path",
        action="store_true",
        help="Continue the previous path on start instead of clearing it."
    )
    return parser.parse_args(argv)


async def run(settings: AppSettings, args: argparse.Namespace) -> int:
    logger = logging.getLogger("main")
    platform = DummyPlatform(settings)
    app = create_tracking_app(settings, platform)

    view = ConsoleMapView()
    screen = app.create_screen(view)
    try:
        screen.create()
        screen.view_created()
        screen.resume()

        # Wait for the permission dialog to be answered.
        while screen.authorization_pending:
            await asyncio.sleep(0.05)

        for cycle in range(1, args.cycles + 1):
            logger.info("Cycle %d/%d", cycle, args.cycles)
            if not await screen.press_start():
                logger.error("Tracking could not be started.")
                return 1

            last_cycle = cycle == args.cycles
            if last_cycle and args.disable_location_after is not None and args.disable_location_after < args.duration:
                await asyncio.sleep(args.disable_location_after)
                platform.set_location_enabled(False)
                screen.pause()
                screen.resume()  # Returning to the screen re-polls the location switch.
                await asyncio.sleep(args.duration - args.disable_location_after)
            else:
                await asyncio.sleep(args.duration)

            await screen.press_stop()
            logger.info("Path holds %d points.", len(app.path))
        return 0
    finally:
        screen.pause()
        screen.destroy()
        await app.shutdown()


def main(argv=None) -> int:
    # 1. Load Configuration
    try:
        settings = AppSettings()
    except Exception as e:
        print(f"Configuration Error: {e}")
        return 1

    args = parse_args(argv)
    if args.deny:
        settings.simulation.grant_permissions = False
    if args.keep_path:
        settings.session.reset_path_on_start = False

    # 2. Setup Logging
    logging.basicConfig(
        level=settings.logging.level,
        format=settings.logging.format,
        stream=sys.stdout
    )
    logger = logging.getLogger("main")
    logger.info(f"Starting Path Tracker v{settings.__version__}")

    try:
        return asyncio.run(run(settings, args))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
        return 130
    except Exception:
        logger.exception("Fatal Application Error")
        return 1
    finally:
        logger.info("Shutdown sequence complete.")


if __name__ == "__main__":
    sys.exit(main())
