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


class Factory(object):
    """
    A class that is used to define a factory for objects.

    Classes register themselves under a name with the :py:meth:`register`
    decorator; calling the factory with that name returns a new instance.
    """

    def __init__(self, description=None):
        self._description = description
        self._cls = {}

    def __call__(self, name, exception=False, **kwds):
        name = str(name)
        if name not in self._cls:
            if not exception:
                return None
            if self._description is None:
                raise ValueError("Unknown factory object type: '%s'" % name)
            raise ValueError("Unknown %s: '%s'" % (self._description, name))
        return self._cls[name](**kwds)

    def __iter__(self):
        yield from self._cls

    def __contains__(self, name):
        return str(name) in self._cls

    def unregister(self, name):
        name = str(name)
        if name in self._cls:
            del self._cls[name]

    def register(self, name):
        def fn(cls):
            self._cls[name] = cls
            return cls

        return fn
