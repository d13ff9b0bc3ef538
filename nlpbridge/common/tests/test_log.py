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

import io
import logging

import nlpbridge.common.unittest as unittest

from nlpbridge.common.log import LoggingIntercept, SuppressLogging, is_debug_set


class TestLogging(unittest.TestCase):
    def test_LoggingIntercept(self):
        logger = logging.getLogger('nlpbridge.test.intercept')
        buf = io.StringIO()
        with LoggingIntercept(buf, 'nlpbridge.test.intercept', logging.WARNING):
            logger.info("not captured")
            logger.warning("captured %s", 'message')
        self.assertEqual(buf.getvalue(), "captured message\n")
        self.assertEqual(logger.handlers, [])

    def test_LoggingIntercept_returns_buffer(self):
        with LoggingIntercept(module='nlpbridge.test.intercept') as out:
            logging.getLogger('nlpbridge.test.intercept.child').error("child")
        self.assertEqual(out.getvalue(), "child\n")

    def test_LoggingIntercept_module_and_logger(self):
        with self.assertRaisesRegex(ValueError, "only one of 'module' and 'logger'"):
            LoggingIntercept(
                module='nlpbridge', logger=logging.getLogger('nlpbridge')
            )

    def test_SuppressLogging(self):
        logger = logging.getLogger('nlpbridge.test.suppress')
        buf = io.StringIO()
        with LoggingIntercept(buf, 'nlpbridge.test', logging.INFO):
            with SuppressLogging('nlpbridge.test'):
                logger.warning("suppressed")
                logger.error("kept")
            logger.warning("after")
        self.assertEqual(buf.getvalue(), "kept\nafter\n")

    def test_SuppressLogging_inactive(self):
        logger = logging.getLogger('nlpbridge.test.suppress')
        buf = io.StringIO()
        with LoggingIntercept(buf, 'nlpbridge.test', logging.INFO):
            with SuppressLogging('nlpbridge.test', active=False):
                logger.warning("shown")
        self.assertEqual(buf.getvalue(), "shown\n")

    def test_is_debug_set(self):
        logger = logging.getLogger('nlpbridge.test.debug')
        logger.setLevel(logging.DEBUG)
        try:
            self.assertTrue(is_debug_set(logger))
            logger.setLevel(logging.INFO)
            self.assertFalse(is_debug_set(logger))
        finally:
            logger.setLevel(logging.NOTSET)


if __name__ == "__main__":
    unittest.main()
