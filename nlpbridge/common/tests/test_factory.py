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

import logging

import nlpbridge.common.unittest as unittest

from nlpbridge.common.factory import Factory
from nlpbridge.common.log import LoggingIntercept
from nlpbridge.common.timing import TicTocTimer, TransformationTimer


class _Widget(object):
    def __init__(self, size=1):
        self.size = size


class TestFactory(unittest.TestCase):
    def test_register_and_create(self):
        factory = Factory('widget type')
        factory.register('small')(_Widget)
        self.assertIn('small', factory)
        self.assertEqual(list(factory), ['small'])
        w = factory('small', size=3)
        self.assertIsInstance(w, _Widget)
        self.assertEqual(w.size, 3)

    def test_unknown(self):
        factory = Factory('widget type')
        self.assertIsNone(factory('large'))
        with self.assertRaisesRegex(ValueError, "Unknown widget type: 'large'"):
            factory('large', exception=True)
        with self.assertRaisesRegex(ValueError, "Unknown factory object type: 'x'"):
            Factory()('x', exception=True)

    def test_unregister(self):
        factory = Factory()
        factory.register('small')(_Widget)
        factory.unregister('small')
        self.assertNotIn('small', factory)
        # unregistering an unknown name is a no-op
        factory.unregister('small')


class TestTiming(unittest.TestCase):
    def test_tictoc(self):
        timer = TicTocTimer()
        first = timer.toc()
        self.assertGreaterEqual(first, 0)
        self.assertGreaterEqual(timer.toc(), first)
        timer.tic()
        self.assertGreaterEqual(timer.toc(), 0)

    def test_transformation_timer(self):
        timer = TransformationTimer(_Widget(), 'apply_to')
        self.assertRegex(
            str(timer),
            r"TransformationTimer object for _Widget \(apply_to\); "
            r"[0-9.]+ elapsed seconds",
        )
        with LoggingIntercept(
            module='nlpbridge.common.timing.transformation', level=logging.INFO
        ) as out:
            timer.report()
        self.assertRegex(
            out.getvalue(),
            r"^ +[0-9.]+ seconds to apply Transformation _Widget \(apply_to\)\n$",
        )


if __name__ == "__main__":
    unittest.main()
