"""CLI entry point for the AI review bot."""
import argparse
import json
import logging
import sys
import traceback

from dotenv import load_dotenv

from review_bot.models import ReviewConfig
from review_bot.orchestrator.exceptions import OrchestratorError, ReviewRunError
from review_bot.pipeline.exceptions import (
    ConfigurationError,
    DiffDiscoveryError,
    PipelineError,
    ServiceConnectionError,
)
from review_bot.cli.config import load_config

load_dotenv()

logger = logging.getLogger("review_bot")

# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_CONNECTIVITY = 2
EXIT_KEYBOARD_INTERRUPT = 130

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="ai-review-bot",
        description=(
            "Review changed files with an Ollama-compatible model and post one "
            "comment per file. Settings come from INPUT_* environment variables; "
            "flags override them."
        ),
    )
    parser.add_argument("--repo-path", type=str, default=None, help="Repository root (default: .)")
    parser.add_argument("--host", type=str, default=None, help="Generation service URL (INPUT_HOST)")
    parser.add_argument("--model", type=str, default=None, help="Model name (INPUT_MODEL)")
    parser.add_argument(
        "--pull-request",
        action="store_true",
        default=None,
        help="Review the branch against --base-ref instead of the HEAD commit",
    )
    parser.add_argument(
        "--base-ref",
        type=str,
        default=None,
        help="Base branch for pull-request mode (INPUT_BASE_REF, default: main)",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--dry-run", action="store_true", help="Print config and exit without running"
    )
    return parser


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging once."""
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format=LOG_FORMAT,
        )
    elif verbose:
        root_logger.setLevel(logging.DEBUG)


def determine_exit_code(exc: BaseException) -> int:
    """Map a fatal error to the process exit code."""
    if isinstance(exc, KeyboardInterrupt):
        return EXIT_KEYBOARD_INTERRUPT
    if isinstance(exc, ServiceConnectionError):
        return EXIT_CONNECTIVITY
    if isinstance(exc, ReviewRunError) and exc.connectivity_failure:
        return EXIT_CONNECTIVITY
    return EXIT_FAILURE


def _log_debug_info(config: ReviewConfig) -> None:
    logger.error("Debugging information:")
    logger.error("  - Host: %s", config.host)
    logger.error("  - Model: %s", config.model)
    logger.error("  - Timeout: %gs", config.generation_timeout_seconds)
    logger.error("  - Max attempts: %d", config.max_attempts)


def _handle_error(label: str, exc: BaseException, verbose: bool) -> int:
    """Log the error and return the exit code."""
    logger.error("%s: %s", label, exc)
    if verbose:
        traceback.print_exc(file=sys.stderr)
    code = determine_exit_code(exc)
    if code == EXIT_CONNECTIVITY:
        logger.error("Suggested fixes:")
        logger.error("  1. Check that the generation service is running and reachable")
        logger.error("  2. Verify network connectivity and the HOST URL")
        logger.error("  3. Consider increasing the timeout values")
        logger.error("  4. Check that the model is available on the service")
    return code


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code integer.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_config(
            repo_path=args.repo_path,
            host=args.host,
            model=args.model,
            review_pull_request=args.pull_request,
            base_ref=args.base_ref,
        )
    except ConfigurationError as exc:
        return _handle_error("Configuration error", exc, args.verbose)

    if args.dry_run:
        print(json.dumps(config.safe_summary(), indent=2, default=str))
        return EXIT_SUCCESS

    logger.info("Configuration: %s", json.dumps(config.safe_summary(), default=str))

    # Resolved at call time so the runner can be patched in tests
    from review_bot.orchestrator.runner import ReviewOrchestrator

    try:
        orchestrator = ReviewOrchestrator(config)
        orchestrator.run()
        logger.info("Code review process completed successfully")
        return EXIT_SUCCESS

    except ConfigurationError as exc:
        return _handle_error("Configuration error", exc, args.verbose)

    except ServiceConnectionError as exc:
        _log_debug_info(config)
        return _handle_error("Generation service unreachable", exc, args.verbose)

    except DiffDiscoveryError as exc:
        return _handle_error("Diff discovery failed", exc, args.verbose)

    except ReviewRunError as exc:
        _log_debug_info(config)
        return _handle_error("Review failed", exc, args.verbose)

    except (PipelineError, OrchestratorError) as exc:
        return _handle_error("Review error", exc, args.verbose)

    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_KEYBOARD_INTERRUPT

    except Exception as exc:
        return _handle_error("Unexpected error", exc, args.verbose)


if __name__ == "__main__":
    sys.exit(main())
