#  ___________________________________________________________________________
#
#  Pyomo: Python Optimization Modeling Objects
#  Copyright (c) 2008-2025
#  National Technology and Engineering Solutions of Sandia, LLC
#  Under the terms of Contract DE-NA0003525 with National Technology and
#  Engineering Solutions of Sandia, LLC, the U.S. Government retains certain
#  rights in this software.
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________

import pytest

# Tests without markers are tagged 'default'; tests tagged 'solver' run
# unless an explicit marker or --solver selection excludes them
_implicit_markers = {'default'}
_extended_implicit_markers = _implicit_markers.union({'solver'})


def pytest_collection_modifyitems(items):
    """Mark every unmarked test with the implicit marker ('default')"""
    for item in items:
        try:
            next(item.iter_markers())
        except StopIteration:
            for marker in _implicit_markers:
                item.add_marker(getattr(pytest.mark, marker))


def pytest_runtest_setup(item):
    """
    Decide whether a collected test runs.

        1) ``--solver NAME``: only tests marked ``solver(NAME)`` run, so
           ``pytest --solver scipy`` exercises the scipy adapter alone.
        2) ``-m EXPR``: pytest's own marker selection applies.
        3) Otherwise unmarked, 'default' and 'solver' tests run; a
           solver test that also carries another marker (e.g. a slow
           scenario marked 'expensive') is skipped.
    """
    solvernames = [mark.args[0] for mark in item.iter_markers(name="solver")]
    solveroption = item.config.getoption("--solver")
    markeroption = item.config.getoption("-m")
    item_markers = set(mark.name for mark in item.iter_markers())
    if solveroption:
        if solveroption not in solvernames:
            pytest.skip("SKIPPED: Test not marked {!r}".format(solveroption))
    elif markeroption:
        return
    elif item_markers:
        if not _implicit_markers.issubset(item_markers) and not item_markers.issubset(
            _extended_implicit_markers
        ):
            pytest.skip('SKIPPED: Only running default, solver, and unmarked tests.')


def pytest_addoption(parser):
    parser.addoption(
        "--solver",
        action="store",
        metavar="SOLVER",
        help="Run only the tests marked for the named solver adapter.",
    )


def pytest_configure(config):
    # registering the markers keeps pytest from warning about them
    config.addinivalue_line(
        "markers", "default: implicit marker for tests without other markers"
    )
    config.addinivalue_line(
        "markers", "solver(name): test that runs the named solver adapter"
    )
