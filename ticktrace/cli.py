"""Command-line interface for ticktrace."""

import argparse
import sys

from ticktrace import __version__
from ticktrace.core import (
    Context,
    Output,
    SessionLogger,
    Settings,
    TickTraceError,
    Tracefs,
    find_trace_root,
    load_settings,
)
from ticktrace.core.errors import ArgumentError
from ticktrace.core.logging import get_log_path
from ticktrace.core.session import TraceSession
from ticktrace.lib.cpulist import format_cpu_list, format_cpumask, mask_to_cpus
from ticktrace.lib.selector import select_mask

PROG = "ticktrace"

MODE_START = "start"
MODE_END = "end"
MODE_COMMAND = "command"

EXIT_INTERRUPTED = 130


class _Parser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting with status 2."""

    def error(self, message: str):
        raise ArgumentError(message)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = _Parser(
        prog=PROG,
        description="Count scheduler ticks on a CPU or set of CPUs using ftrace",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ticktrace --cpu 0-1 sleep 1        count ticks on CPUs 0 and 1 during 'sleep 1'
  ticktrace --cpu 3 --start          begin a bracketed measurement on CPU 3
  ticktrace --cpu 3 --end --batch    end it and print only the count
  ticktrace --cpu rt command         use the CPUs of the 'rt' cpuset

Only one measurement may run at a time on a system: the trace
settings are global kernel state.
""",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"{PROG} {__version__}",
    )
    parser.add_argument(
        "-c", "--cpu",
        required=True,
        metavar="CPU",
        help="CPU number, CPU range list (e.g. 0-3) or cpuset name",
    )
    parser.add_argument(
        "-s", "--start",
        action="store_true",
        help="Start a bracketed measurement and exit",
    )
    parser.add_argument(
        "-e", "--end",
        action="store_true",
        help="End a bracketed measurement and report the tick count",
    )
    parser.add_argument(
        "-f", "--file",
        metavar="PATH",
        help="Also save the trace log to PATH",
    )
    parser.add_argument(
        "-b", "--batch",
        action="store_true",
        help="Print only the tick count",
    )
    parser.add_argument(
        "--format",
        choices=["plain", "json"],
        default="plain",
        help="Output format (default: plain)",
    )
    parser.add_argument(
        "--no-log",
        action="store_true",
        help="Do not write the JSONL session log",
    )
    parser.add_argument(
        "command",
        nargs=argparse.REMAINDER,
        help="Command to run while tracing (when neither --start nor --end)",
    )
    return parser


def resolve_mode(opts: argparse.Namespace) -> str:
    """
    Work out the mode from the flags.

    Raises:
        ArgumentError: If the flags and trailing command conflict
    """
    if opts.start and opts.end:
        raise ArgumentError("--start and --end cannot be combined")
    if opts.start or opts.end:
        if opts.command:
            flag = "--start" if opts.start else "--end"
            raise ArgumentError(f"a command cannot be given with {flag}")
        return MODE_START if opts.start else MODE_END
    if not opts.command:
        raise ArgumentError("a command is required unless --start or --end is given")
    return MODE_COMMAND


def finish(session: TraceSession, opts: argparse.Namespace, output: Output) -> None:
    """Save and count a stopped session, then print the result."""
    saved = session.persist(opts.file)
    ticks = session.analyze()
    output.emit({"ticks": ticks, "saved_to": opts.file if saved else None})
    output.render(opts.format, batch=opts.batch)


def log_failure(logger: SessionLogger, output: Output, message: str, **extra) -> None:
    """Log a failure without letting a broken log hide it."""
    try:
        logger.error(message, **extra)
    except TickTraceError as e:
        output.warning(str(e))


def run(
    opts: argparse.Namespace,
    settings: Settings,
    output: Output,
    context: Context,
    logger: SessionLogger,
) -> int:
    """Carry out one invocation. Errors propagate as TickTraceError."""
    mask = select_mask(opts.cpu, context, settings.cpuset_root, settings.max_cpus)
    mode = resolve_mode(opts)

    tracefs = Tracefs(find_trace_root(context, settings.trace_root), context)
    cpumask = format_cpumask(mask)
    output.emit({
        "mode": mode,
        "cpu": opts.cpu,
        "cpus": format_cpu_list(mask_to_cpus(mask)),
        "cpumask": cpumask,
        "trace_root": tracefs.root,
    })
    logger.debug(
        "Settings",
        trace_root=settings.trace_root,
        cpuset_root=settings.cpuset_root,
        tick_function=settings.tick_function,
        max_cpus=settings.max_cpus,
    )
    logger.info("Invocation", mode=mode, cpu=opts.cpu, cpumask=cpumask)

    if mode == MODE_START:
        if opts.file:
            output.warning("--file has no effect with --start")
        session = TraceSession(tracefs, settings.tick_function, logger)
        session.configure(mask)
        session.start()
        if opts.format == "json":
            output.render(opts.format)
        return 0

    if mode == MODE_END:
        session = TraceSession.attach(tracefs, settings.tick_function, logger)
        if not session.tracing_enabled():
            output.warning("tracing was not running; was --start used?")
            logger.warning("Tracing was already off at --end")
        session.stop()
        finish(session, opts, output)
        return 0

    command = opts.command[1:] if opts.command[0] == "--" else opts.command
    if not command:
        raise ArgumentError("a command is required unless --start or --end is given")

    session = TraceSession(tracefs, settings.tick_function, logger)
    session.configure(mask)
    session.start()
    try:
        status = session.run_command(command)
    finally:
        session.stop()
    output.emit({"command": command, "command_status": status})
    finish(session, opts, output)
    return 0


def main(argv: list[str] | None = None, context: Context | None = None) -> int:
    """Main entry point."""
    if argv is None:
        argv = sys.argv[1:]

    parser = create_parser()
    if not argv:
        parser.print_help()
        return 0

    output = Output(PROG)
    try:
        opts = parser.parse_args(argv)
        settings = load_settings()
    except TickTraceError as e:
        output.error(str(e))
        output.render_messages()
        return 1

    context = context or Context()
    with SessionLogger(get_log_path(settings.log_dir), enabled=not opts.no_log) as logger:
        try:
            return run(opts, settings, output, context, logger)
        except TickTraceError as e:
            output.error(str(e))
            log_failure(logger, output, "Invocation failed", error=str(e), kind=type(e).__name__)
            return 1
        except KeyboardInterrupt:
            output.error("interrupted")
            log_failure(logger, output, "Interrupted")
            return EXIT_INTERRUPTED
        finally:
            output.render_messages()


if __name__ == "__main__":
    sys.exit(main())
