"""Invoke tasks for the rtsweep project."""

from invoke import Context, task

SOURCES = "src/ tests/ tasks.py"


@task
def lint(ctx: Context) -> None:
    """Run ruff over the package, tests and this file."""
    ctx.run(f"uv run ruff check {SOURCES}", pty=True)


@task
def format(ctx: Context, check: bool = False, fix: bool = False) -> None:
    """Format with ruff; --fix also applies safe lint fixes first."""
    if fix:
        ctx.run(f"uv run ruff check --fix {SOURCES}", pty=True)
    mode = "--check" if check and not fix else ""
    ctx.run(f"uv run ruff format {mode} {SOURCES}", pty=True)


@task
def test(ctx: Context, verbose: bool = True, match: str = "", module: str = "") -> None:
    """
    Run the pytest suite.

    --match selects tests by keyword (pytest -k), --module runs one file,
    e.g. `invoke test --module scgi`.
    """
    target = f"tests/test_{module}.py" if module else "tests/"
    flags = ["-v" if verbose else "-q"]
    if match:
        flags.append(f"-k '{match}'")
    ctx.run(f"uv run pytest {target} {' '.join(flags)}", pty=True)


@task
def check(ctx: Context) -> None:
    """Run lint, the format check and the suite."""
    lint(ctx)
    format(ctx, check=True)
    test(ctx, verbose=False)


@task
def sweep(ctx: Context, socket: str = "/tmp/rtorrent.sock", timeout: float = 0, args: str = "") -> None:
    """
    Run rtsweep against a daemon socket.

    A positive --timeout is passed through RTSWEEP_TIMEOUT.
    """
    env = {"RTSWEEP_TIMEOUT": str(timeout)} if timeout > 0 else {}
    ctx.run(f"uv run rtsweep --socket {socket} {args}", pty=True, env=env)
