"""Command-line runner for adapter binaries.

run_adapter parses ``<adapter> <command> [flags]``, loads the runtime
context, routes to the adapter's handler and writes protocol records to
stdout. Logs go to stderr.

Architecture:
    argv -> argparse -> runtime context -> AdapterContext -> handler
                                                 |
                                     JSONLWriter (stdout), logger (stderr)

    Exit codes:
    - 0: command completed (``send`` and ``health`` handler failures are
      reported as structured records and still exit 0)
    - 1: usage error, missing runtime context, unsupported command or a
      handler failure in any other command

Design Decisions:
    - One CancellationSignal per invocation, raised by SIGINT/SIGTERM
    - Handler output is validated through the wire models before writing
      (disable with RunOptions.validate_output)
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Any, NoReturn, TextIO

from pydantic import BaseModel, ValidationError

from ..config import load_runtime_context_from_env, require_runtime_context
from ..core.enums import DeliveryErrorType
from ..core.exceptions import AdapterError, DeliveryFailure, UnsupportedCommandError
from ..io.jsonl import JSONLWriter, read_lines
from ..models.adapter import AdapterAccount, AdapterHealth, AdapterInfo
from ..models.delivery import DeliveryError, DeliveryResult, SendRequest
from ..models.events import NexusEvent
from ..runtime.cancellation import CancellationSignal, install_signal_handlers
from ..runtime.context import AdapterContext
from ..runtime.monitor import EmitFunc
from ..runtime.stream import StreamDispatcher, StreamHandlers
from ..utils.aio import maybe_await
from ..utils.logging import configure_logging
from .definition import Adapter


@dataclass(frozen=True)
class RunOptions:
    """Process-level knobs for run_adapter (mostly for embedding and tests).

    Attributes:
        prog: Program name shown in usage (defaults to ``sys.argv[0]``)
        env: Environment used to locate the runtime context (defaults to os.environ)
        stdin: Input stream for ``stream`` (defaults to sys.stdin)
        stdout: Protocol output stream (defaults to sys.stdout)
        stderr: Log and usage stream (defaults to sys.stderr)
        require_runtime_context: Fail commands other than ``info`` when no
            runtime context is injected
        validate_output: Validate handler output through the wire models
        install_signal_handlers: Raise cancellation on SIGINT/SIGTERM
    """

    prog: str | None = None
    env: Mapping[str, str] | None = None
    stdin: TextIO | None = None
    stdout: TextIO | None = None
    stderr: TextIO | None = None
    require_runtime_context: bool = True
    validate_output: bool = True
    install_signal_handlers: bool = True


class _UsageError(Exception):
    pass


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors instead of exiting with 2."""

    def error(self, message: str) -> NoReturn:
        raise _UsageError(f"{self.prog}: error: {message}")

    def print_help(self, file: TextIO | None = None) -> None:
        # stdout is reserved for protocol records
        super().print_help(file if file is not None else sys.stderr)


def parse_date(value: str) -> datetime:
    """Parse a ``--since`` value: ISO 8601 or ``YYYY-MM-DD``.

    Values without an offset are taken as UTC.

    Raises:
        ValueError: If the value is empty or in no recognized format
    """
    text = value.strip()
    if not text:
        raise ValueError("date is required")
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        try:
            parsed = datetime.combine(date.fromisoformat(text), datetime.min.time())
        except ValueError:
            raise ValueError(
                "unrecognized date format (expected ISO 8601 or YYYY-MM-DD)"
            ) from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _since_arg(value: str) -> datetime:
    try:
        return parse_date(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid --since date {value!r}: {e}") from e


def build_parser(prog: str | None = None) -> argparse.ArgumentParser:
    """Build the adapter command-line parser."""
    common = _ArgumentParser(add_help=False)
    common.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Enable debug logging",
    )

    parser = _ArgumentParser(prog=prog, description="Nexus adapter", parents=[common])
    commands = parser.add_subparsers(
        dest="command", metavar="<command>", parser_class=_ArgumentParser
    )
    commands.required = True

    commands.add_parser("info", parents=[common], help="Self-describe this adapter")
    commands.add_parser("help", parents=[common], help="Show this help")

    monitor = commands.add_parser("monitor", parents=[common], help="Stream live events (JSONL)")
    monitor.add_argument("--account", required=True, help="Account ID")
    monitor.add_argument("--format", choices=["jsonl"], default="jsonl", help="Output format")

    send = commands.add_parser("send", parents=[common], help="Deliver a message")
    send.add_argument("--account", required=True, help="Account ID")
    send.add_argument("--to", required=True, help="Target (email, phone, channel:id)")
    payload = send.add_mutually_exclusive_group(required=True)
    payload.add_argument("--text", help="Message text")
    payload.add_argument("--media", help="Media file path")
    send.add_argument("--caption", help="Media caption")
    send.add_argument("--reply-to", dest="reply_to", help="Reply to event ID")
    send.add_argument("--thread", help="Thread ID")

    backfill = commands.add_parser("backfill", parents=[common], help="Emit historical events")
    backfill.add_argument("--account", required=True, help="Account ID")
    backfill.add_argument(
        "--since",
        required=True,
        type=_since_arg,
        help="Backfill start date (ISO 8601 or YYYY-MM-DD)",
    )
    backfill.add_argument("--format", choices=["jsonl"], default="jsonl", help="Output format")

    health = commands.add_parser("health", parents=[common], help="Check connection status")
    health.add_argument("--account", required=True, help="Account ID")

    accounts = commands.add_parser("accounts", parents=[common], help="List configured accounts")
    accounts.add_argument("action", nargs="?", default="list", choices=["list"])

    stream = commands.add_parser(
        "stream", parents=[common], help="Streaming delivery (stdin/stdout)"
    )
    stream.add_argument("--account", required=True, help="Account ID")
    stream.add_argument("--format", choices=["jsonl"], default="jsonl", help="Output format")

    return parser


def _pre_scan_verbose(argv: Sequence[str]) -> bool:
    return any(arg in ("-v", "--verbose") for arg in argv)


def _coerce(model: type[BaseModel], value: Any, validate: bool) -> Any:
    if not validate or isinstance(value, model):
        return value
    if isinstance(value, BaseModel):
        value = value.model_dump(by_alias=True)
    return model.model_validate(value)


def _make_emit(ctx: AdapterContext, validate: bool) -> EmitFunc:
    def emit(event: NexusEvent) -> None:
        try:
            ctx.writer.write(_coerce(NexusEvent, event, validate))
        except (ValidationError, TypeError, ValueError, OSError) as e:
            ctx.logger.error("emit error: %s", e)

    return emit


def _stream_handlers(adapter: Adapter, ctx: AdapterContext) -> StreamHandlers:
    setup = adapter.stream
    if isinstance(setup, StreamHandlers):
        return setup
    return setup(ctx)


async def _dispatch(
    adapter: Adapter,
    args: argparse.Namespace,
    ctx: AdapterContext,
    options: RunOptions,
) -> None:
    validate = options.validate_output
    log = ctx.logger

    match args.command:
        case "info":
            info = await maybe_await(adapter.info())
            ctx.writer.write(_coerce(AdapterInfo, info, validate))

        case "monitor":
            if adapter.monitor is None:
                raise UnsupportedCommandError("monitor")
            log.info("monitor starting for account %r", args.account)
            await maybe_await(adapter.monitor(ctx, args.account, _make_emit(ctx, validate)))
            log.info("monitor stopped cleanly")

        case "backfill":
            if adapter.backfill is None:
                raise UnsupportedCommandError("backfill")
            log.info(
                "backfill starting for account %r since %s",
                args.account,
                args.since.isoformat(),
            )
            await maybe_await(
                adapter.backfill(ctx, args.account, args.since, _make_emit(ctx, validate))
            )
            log.info("backfill completed")

        case "send":
            if adapter.send is None:
                raise UnsupportedCommandError("send")
            request = SendRequest(
                account=args.account,
                to=args.to,
                text=args.text,
                media=args.media,
                caption=args.caption,
                reply_to_id=args.reply_to,
                thread_id=args.thread,
            )
            try:
                result = _coerce(
                    DeliveryResult, await maybe_await(adapter.send(ctx, request)), validate
                )
            except Exception as e:
                log.error("send failed: %s", e)
                if isinstance(e, DeliveryFailure):
                    error = e.to_delivery_error()
                else:
                    error = DeliveryError(
                        type=DeliveryErrorType.UNKNOWN,
                        message=str(e) or type(e).__name__,
                        retry=False,
                    )
                result = DeliveryResult.failure(error)
            ctx.writer.write(result)

        case "health":
            if adapter.health is None:
                raise UnsupportedCommandError("health")
            try:
                health = _coerce(
                    AdapterHealth, await maybe_await(adapter.health(ctx, args.account)), validate
                )
            except Exception as e:
                log.error("health check failed: %s", e)
                health = AdapterHealth(
                    connected=False,
                    account=args.account,
                    error=str(e) or type(e).__name__,
                )
            ctx.writer.write(health)

        case "accounts":
            if adapter.accounts is None:
                raise UnsupportedCommandError("accounts")
            accounts = await maybe_await(adapter.accounts(ctx))
            ctx.writer.write([_coerce(AdapterAccount, account, validate) for account in accounts])

        case "stream":
            if adapter.stream is None:
                raise UnsupportedCommandError("stream")
            # stream_start.target carries the canonical account; --account is
            # still required to keep the command contract uniform
            log.info("stream handler starting")
            dispatcher = StreamDispatcher(_stream_handlers(adapter, ctx), ctx.writer, logger=log)
            await dispatcher.run(read_lines(options.stdin), ctx.cancel)
            log.info("stream handler stopped cleanly")


async def run_adapter_async(
    adapter: Adapter,
    argv: Sequence[str] | None = None,
    options: RunOptions | None = None,
) -> int:
    """Run one adapter command inside an existing event loop.

    Returns:
        Process exit code
    """
    opts = options if options is not None else RunOptions()
    args_in = list(sys.argv[1:] if argv is None else argv)
    stderr = opts.stderr if opts.stderr is not None else sys.stderr
    prog = opts.prog or os.path.basename(sys.argv[0]) or "adapter"

    log = configure_logging(_pre_scan_verbose(args_in), stream=stderr)
    parser = build_parser(prog)

    if not args_in or args_in[0] in ("help", "-h", "--help"):
        parser.print_help(stderr)
        return 0 if args_in else 1

    try:
        args = parser.parse_args(args_in)
    except _UsageError as e:
        parser.print_usage(stderr)
        stderr.write(f"{e}\n")
        return 1
    except SystemExit as e:
        # -h/--help on a subcommand
        return e.code if isinstance(e.code, int) else 0

    if args.command == "help":
        parser.print_help(stderr)
        return 0

    runtime = None
    if args.command != "info":
        try:
            runtime = (
                require_runtime_context(opts.env)
                if opts.require_runtime_context
                else load_runtime_context_from_env(opts.env)
            )
        except AdapterError as e:
            log.error("%s", e)
            return 1

    cancel = CancellationSignal()
    if opts.install_signal_handlers:
        install_signal_handlers(cancel)

    ctx = AdapterContext(
        cancel=cancel,
        logger=log,
        runtime=runtime,
        writer=JSONLWriter(opts.stdout),
    )

    try:
        await _dispatch(adapter, args, ctx, opts)
    except Exception as e:
        log.error("%s", e)
        logging.getLogger(__name__).debug("command %s failed", args.command, exc_info=True)
        return 1
    return 0


def run_adapter(
    adapter: Adapter,
    argv: Sequence[str] | None = None,
    options: RunOptions | None = None,
) -> int:
    """Run one adapter command on a fresh event loop and return the exit code."""
    return asyncio.run(run_adapter_async(adapter, argv, options))


def run(adapter: Adapter, argv: Sequence[str] | None = None) -> NoReturn:
    """Entry point for adapter binaries: run the command and exit.

    Example:
        >>> if __name__ == "__main__":
        ...     run(Adapter(info=describe, monitor=watch_inbox))
    """
    sys.exit(run_adapter(adapter, argv))
