"""Entry point for dotrepeat.

Usage:
    python -m dotrepeat.main                   # full mode (daemon + tray)
    python -m dotrepeat.main --daemon          # daemon only (no GUI)
    python -m dotrepeat.main --explain LOG     # classify a JSON event log and exit
"""
import sys
import signal
import logging
import argparse


def setup_logging(debug: bool = False):
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _start_notification_timer(daemon, tray):
    """Start a QTimer that shows queued daemon notifications in the tray.

    Runs in the Qt main thread; the daemon itself never touches Qt.
    """
    from PyQt5.QtCore import QTimer

    def _poll_notifications():
        for message in daemon.consume_notifications():
            tray.show_notification(message)

    timer = QTimer()
    timer.setInterval(200)
    timer.timeout.connect(_poll_notifications)
    timer.start()
    return timer  # caller must keep reference to prevent GC


def run_full(debug: bool = False):
    """Run daemon + tray in a single process (default mode)."""
    from PyQt5.QtWidgets import QApplication
    from dotrepeat.config import Config
    from dotrepeat.tray import TrayIcon
    from dotrepeat.daemon import Daemon

    app = QApplication(sys.argv)
    app.setApplicationName("dotrepeat")
    app.setQuitOnLastWindowClosed(False)

    config = Config()
    setup_logging(debug or config.debug_logging)

    daemon = Daemon(config)
    tray = TrayIcon(config, daemon)
    tray.show()
    daemon.start()

    notification_timer = _start_notification_timer(daemon, tray)

    exit_code = app.exec_()
    notification_timer.stop()
    daemon.stop()
    sys.exit(exit_code)


def run_daemon(debug: bool = False):
    """Run daemon only (headless, for systemd user service).

    Notifications have nowhere to go; they are already in the log.
    """
    import time
    from dotrepeat.config import Config
    from dotrepeat.daemon import Daemon

    config = Config()
    setup_logging(debug or config.debug_logging)

    logger = logging.getLogger(__name__)
    logger.info("Starting dotrepeat daemon (headless mode)")

    daemon = Daemon(config)
    daemon.start()

    try:
        while daemon.running:
            daemon.consume_notifications()
            time.sleep(0.2)
    except KeyboardInterrupt:
        pass
    finally:
        daemon.stop()
        logger.info("Daemon stopped")


def explain(path, debug: bool = False, config_path=None) -> int:
    """Print what a repeat would replay for the event log stored at path.

    Command classes come from the config at config_path, or the user's
    config when none is given.
    """
    from dotrepeat.classifier import CommandClasses, classify
    from dotrepeat.config import Config
    from dotrepeat.events import describe_action, load_events

    setup_logging(debug)
    config = Config(config_path) if config_path else Config()
    try:
        events = load_events(path)
    except (OSError, ValueError) as e:
        print(f"Cannot read event log {path}: {e}", file=sys.stderr)
        return 1

    result = classify(
        events,
        CommandClasses.from_config(config),
        capacity=config.ring_capacity,
        sentinel=config.completion_sentinel,
    )
    print(f"events:           {len(events)}")
    print(f"state:            {result.state}")
    print(f"completion start: {result.completion_start}")
    print("actions:          " + (" ".join(describe_action(a) for a in result.actions) or "(none)"))
    for message in result.diagnostics:
        print(f"warning:          {message}")
    return 0


def main(argv=None):
    signal.signal(signal.SIGINT, signal.SIG_DFL)

    parser = argparse.ArgumentParser(description="dotrepeat: repeat the last edit")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--daemon", action="store_true",
                       help="Run daemon only (headless, for systemd)")
    group.add_argument("--explain", metavar="LOG",
                       help="Classify a JSON event log and print the repeatable run")
    parser.add_argument("--debug", action="store_true",
                        help="Enable debug logging")
    parser.add_argument("--config", metavar="FILE",
                        help="Read command classes from FILE (with --explain)")
    args = parser.parse_args(argv)

    if args.explain:
        sys.exit(explain(args.explain, debug=args.debug, config_path=args.config))
    elif args.daemon:
        run_daemon(debug=args.debug)
    else:
        run_full(debug=args.debug)


if __name__ == "__main__":
    main()
