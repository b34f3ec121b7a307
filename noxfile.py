"""Nox configuration for testing and linting."""

import nox

nox.options.sessions = ["tests", "lint"]
python_versions = ["3.11", "3.12"]


@nox.session(python=python_versions)
def tests(session):
    """Run the test suite with coverage."""
    session.install("-e", ".[dev]")
    session.run(
        "pytest",
        "--cov=geev_core",
        "--cov-report=term-missing",
        "--cov-report=xml:coverage.xml",
        "--cov-fail-under=85",
        "-v",
        *session.posargs,
    )


@nox.session(python=python_versions[0])
def lint(session):
    """Run ruff for linting and formatting."""
    session.install("ruff>=0.1.0")
    session.run("ruff", "check", "geev_core", "scripts", "tests")
    session.run("ruff", "format", "--check", "geev_core", "scripts", "tests")


@nox.session(python=python_versions[0])
def format_code(session):
    """Format code with ruff."""
    session.install("ruff>=0.1.0")
    session.run("ruff", "format", "geev_core", "scripts", "tests")
    session.run("ruff", "check", "--fix", "geev_core", "scripts", "tests")


@nox.session(python=python_versions[0])
def simulate(session):
    """Run seeded simulations and fail on any invariant violation."""
    session.install("-e", ".")
    seeds = session.posargs or ["0", "1", "2"]
    for seed in seeds:
        session.run("python", "-m", "geev_core", "--seed", seed, "--steps", "2000")


@nox.session(python=python_versions[0])
def test_single(session):
    """Run a single test file or test function."""
    if not session.posargs:
        session.error("Please provide a test file or function to run")

    session.install("-e", ".[dev]")
    session.run("pytest", "-v", *session.posargs)
