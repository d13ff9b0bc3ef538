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
#
# Each module must be importable on its own (in a fresh interpreter),
# independent of the order in which the rest of the package is loaded.

import os
import subprocess
import sys

from parameterized import parameterized

import nlpbridge.common.unittest as unittest

_package_root = os.path.dirname(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
)

_modules = [
    'nlpbridge.core.expr.numeric_expr',
    'nlpbridge.core.expr.calculus.derivatives',
    'nlpbridge.core.model',
    'nlpbridge.core.plugins.transform.epigraph',
    'nlpbridge.repn.util',
    'nlpbridge.repn.linear',
    'nlpbridge.repn.canonical',
    'nlpbridge.nlp.evaluator',
    'nlpbridge.solver.orchestrator',
    'nlpbridge.solver.scipy_solver',
]


class TestPackageLayout(unittest.TestCase):
    @parameterized.expand([(m,) for m in _modules])
    def test_import_first(self, module):
        rc = subprocess.run(
            [sys.executable, '-c', 'import %s' % (module,)],
            cwd=_package_root,
            capture_output=True,
            text=True,
        )
        if rc.returncode:
            self.fail(
                "Importing %s in a fresh interpreter failed:\n%s"
                % (module, rc.stderr)
            )

    def test_markers_registered(self):
        # collection tags unmarked tests 'default'; an unregistered
        # marker would be reported as a PytestUnknownMarkWarning
        rc = subprocess.run(
            [
                sys.executable,
                '-m',
                'pytest',
                '-p',
                'no:cacheprovider',
                '-W',
                'error::pytest.PytestUnknownMarkWarning',
                '--collect-only',
                '-q',
                os.path.join('nlpbridge', 'common', 'tests', 'test_factory.py'),
            ],
            cwd=_package_root,
            capture_output=True,
            text=True,
        )
        self.assertEqual(rc.returncode, 0, rc.stdout + rc.stderr)
