import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13"]


def _install(session: nox.Session) -> None:
    """Install the project with its test extra into the nox virtualenv."""
    session.install("-e", ".[test]")


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run full test suite across Python versions."""
    _install(session)
    session.run("pytest")


@nox.session(python=PYTHON_VERSIONS)
def tests_domain(session: nox.Session) -> None:
    """Run domain-layer tests only (no HTTP, no client)."""
    _install(session)
    session.run("pytest", "tests/ratings/domain/")


@nox.session(python=PYTHON_VERSIONS)
def tests_client(session: nox.Session) -> None:
    """Run the client cache and transport tests."""
    _install(session)
    session.run("pytest", "tests/ratings/client/")
