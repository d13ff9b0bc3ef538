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

import inspect
import enum

from operator import attrgetter

NOTSET = object()


def Bool(val):
    """Domain validator for bool-like objects.

    This is a more strict domain than ``bool``, as it will error on
    values that do not "look" like a Boolean value (i.e., it accepts
    ``True``, ``False``, 0, 1, and the case insensitive strings
    ``'true'``, ``'false'``, ``'yes'``, ``'no'``, ``'t'``, ``'f'``,
    ``'y'``, and ``'n'``)

    """
    if type(val) is bool:
        return val
    if isinstance(val, str):
        v = val.upper()
        if v in {'TRUE', 'YES', 'T', 'Y', '1'}:
            return True
        if v in {'FALSE', 'NO', 'F', 'N', '0'}:
            return False
    elif int(val) == float(val):
        v = int(val)
        if v in {0, 1}:
            return bool(v)
    raise ValueError("Expected Boolean, but received %s" % (val,))


def PositiveInt(val):
    """Domain validation function admitting strictly positive integers"""
    ans = int(val)
    # reject floating point values with a fractional part
    if ans != float(val) or ans <= 0:
        raise ValueError("Expected positive int, but received %s" % (val,))
    return ans


def NonNegativeFloat(val):
    """Domain validation function admitting numbers greater than or equal to 0"""
    ans = float(val)
    if ans < 0:
        raise ValueError("Expected non-negative float, but received %s" % (val,))
    return ans


class In(object):
    """In(domain, cast=None)
    Domain validation class admitting a Container of possible values

    This will admit any value that is in the `domain` Container (i.e.,
    Container.__contains__() returns True).  If the domain is an
    :py:class:`enum.Enum`, values are first looked up as Enum values
    and then as member names, and the Enum member is returned.

    """

    def __init__(self, domain, cast=None):
        self._domain = domain
        self._cast = cast

    def __call__(self, value):
        if inspect.isclass(self._domain) and issubclass(self._domain, enum.Enum):
            try:
                return self._domain(value)
            except ValueError:
                try:
                    return self._domain[value]
                except KeyError:
                    pass
            raise ValueError("%r is not a valid %s" % (value, self._domain.__name__))
        if self._cast is not None:
            v = self._cast(value)
        else:
            v = value
        if v in self._domain:
            return v
        raise ValueError("value %s not in domain %s" % (value, self._domain))

    def domain_name(self):
        if inspect.isclass(self._domain):
            return f'In[{self._domain.__name__}]'
        return f'In{self._domain}'


class IsInstance(object):
    """
    Domain validator for type checking.

    Parameters
    ----------
    *bases : tuple of type
        Valid types.
    """

    def __init__(self, *bases):
        assert bases
        self.baseClasses = bases

    def __call__(self, obj):
        if isinstance(obj, self.baseClasses):
            return obj
        class_names = ", ".join(repr(kls.__name__) for kls in self.baseClasses)
        raise ValueError(
            f"Expected an instance of {class_names}, but received value "
            f"{obj!r} of type {type(obj).__name__!r}"
        )

    def domain_name(self):
        return f"IsInstance[{', '.join(k.__name__ for k in self.baseClasses)}]"


def _domain_name(domain):
    if domain is None:
        return ""
    elif hasattr(domain, 'domain_name'):
        dn = domain.domain_name
        if hasattr(dn, '__call__'):
            return dn()
        return dn
    elif domain.__class__ is type or inspect.isfunction(domain):
        return domain.__name__
    return None


class ConfigBase(object):
    __slots__ = (
        '_parent',
        '_domain',
        '_name',
        '_userSet',
        '_data',
        '_default',
        '_description',
        '_doc',
    )

    def __init__(self, default=None, domain=None, description=None, doc=None):
        self._parent = None
        self._name = None
        self._userSet = False
        self._data = NOTSET
        self._default = default
        self._domain = domain
        self._description = description
        self._doc = doc

    def __call__(
        self,
        value=NOTSET,
        default=NOTSET,
        domain=NOTSET,
        description=NOTSET,
        doc=NOTSET,
        implicit=NOTSET,
        preserve_implicit=False,
    ):
        # Overriding arguments are passed through to the constructor so
        # that derived ConfigDicts re-run their declarations.
        kwds = {}
        fields = ('description', 'doc')
        if isinstance(self, ConfigDict):
            fields += (('implicit', '_implicit_declaration'),)
            assert domain is NOTSET
            assert default is NOTSET
        else:
            fields += ('domain',)
            if default is NOTSET:
                default = self.value()
                if default is NOTSET:
                    default = None
            kwds['default'] = default
            assert implicit is NOTSET
        for field in fields:
            if type(field) is tuple:
                field, attr = field
            else:
                attr = '_' + field
            if locals()[field] is NOTSET:
                kwds[field] = getattr(self, attr, NOTSET)
            else:
                kwds[field] = locals()[field]

        ans = self.__class__(**kwds)

        if isinstance(self, ConfigDict):
            for k, v in self._data.items():
                if preserve_implicit or k in self._declared:
                    ans._data[k] = _tmp = v(preserve_implicit=preserve_implicit)
                    if k in self._declared:
                        ans._declared.add(k)
                    _tmp._parent = ans
                    _tmp._name = v._name

        if value is not NOTSET:
            ans.set_value(value)
        return ans

    def name(self, fully_qualified=False):
        if self._name is None:
            return ""
        elif fully_qualified and self._parent is not None:
            pName = self._parent.name(fully_qualified)
            if not pName:
                return self._name
            return pName + '.' + self._name
        else:
            return self._name

    def domain_name(self):
        _dn = _domain_name(self._domain)
        if _dn is None:
            return self.name()
        return _dn

    def _cast(self, value):
        if value is None:
            return value
        if self._domain is not None:
            try:
                return self._domain(value)
            except (ValueError, TypeError) as err:
                if hasattr(self._domain, '__name__'):
                    _dom = self._domain.__name__
                else:
                    _dom = type(self._domain)
                raise ValueError(
                    "invalid value for configuration '%s':\n"
                    "\tFailed casting %s\n\tto %s\n\tError: %s"
                    % (self.name(True), value, _dom, err)
                ) from err
        else:
            return value

    def reset(self):
        self._userSet = False
        self._data = NOTSET
        self.set_value(self._default)
        self._userSet = False


class ConfigValue(ConfigBase):
    """Store and manipulate a single configuration value.

    Parameters
    ----------
    default: optional
        The default value that this ConfigValue will take if no value is
        provided.

    domain: Callable, optional
        The domain can be any callable that accepts a candidate value
        and returns the value converted to the desired type, optionally
        performing any data validation.  Examples include type
        constructors like `int` or `float` and the validators in this
        module (:py:class:`In`, :py:func:`NonNegativeFloat`, ...).

    description: str, optional
        The short description of this value

    doc: str, optional
        The long documentation string for this value

    """

    __slots__ = ()

    def __init__(self, *args, **kwds):
        super().__init__(*args, **kwds)
        self._data = self._cast(self._default)

    def value(self):
        return self._data

    def set_value(self, value):
        self._data = self._cast(value)
        self._userSet = True


class ConfigDict(ConfigBase):
    """Store and manipulate a dictionary of configuration values.

    Parameters
    ----------
    description: str, optional
        The short description of this dict

    doc: str, optional
        The long documentation string for this dict

    implicit: bool, optional
        If True, the ConfigDict will allow "implicitly" declared
        keys, that is, keys can be stored into the ConfigDict that
        were not previously declared using :py:meth:`declare`.

    """

    __slots__ = ('_implicit_declaration', '_declared')
    _reserved_words = set(ConfigBase.__slots__ + __slots__)

    def __init__(self, description=None, doc=None, implicit=False):
        self._implicit_declaration = implicit
        self._declared = set()
        ConfigBase.__init__(self, None, None, description, doc)
        self._data = {}

    def __getitem__(self, key):
        _key = str(key).replace(' ', '_')
        if isinstance(self._data[_key], ConfigValue):
            return self._data[_key].value()
        else:
            return self._data[_key]

    def get(self, key, default=NOTSET):
        _key = str(key).replace(' ', '_')
        if _key in self._data:
            return self._data[_key]
        if default is NOTSET:
            return None
        return ConfigValue(default)

    def __setitem__(self, key, val):
        _key = str(key).replace(' ', '_')
        if _key not in self._data:
            self.add(key, val)
        else:
            cfg = self._data[_key]
            # Trap self-assignment (the "self.x = self.declare(...)" idiom)
            if cfg is val:
                return
            cfg.set_value(val)

    def __contains__(self, key):
        _key = str(key).replace(' ', '_')
        return _key in self._data

    def __len__(self):
        return len(self._data)

    def __iter__(self):
        return map(attrgetter('_name'), self._data.values())

    def __getattr__(self, attr):
        # Only reached after the normal attribute lookup failed
        _attr = attr.replace(' ', '_')
        if _attr == "_data" or _attr not in self._data:
            raise AttributeError(
                f"'{type(self).__name__}' object has no attribute '{attr}'"
            )
        return ConfigDict.__getitem__(self, _attr)

    def __setattr__(self, name, value):
        if name in ConfigDict._reserved_words:
            super().__setattr__(name, value)
        else:
            ConfigDict.__setitem__(self, name, value)

    def keys(self):
        return iter(self)

    def values(self):
        return map(self.__getitem__, self._data)

    def items(self):
        for key, val in self._data.items():
            yield (val._name, self[key])

    def _add(self, name, config):
        name = str(name)
        _name = name.replace(' ', '_')
        if config._parent is not None:
            raise ValueError(
                "config '%s' is already assigned to ConfigDict '%s'; "
                "cannot reassign to '%s'"
                % (name, config._parent.name(True), self.name(True))
            )
        if _name in self._data:
            raise ValueError(
                "duplicate config '%s' defined for ConfigDict '%s'"
                % (name, self.name(True))
            )
        self._data[_name] = config
        config._parent = self
        config._name = name
        return config

    def declare(self, name, config):
        _name = str(name).replace(' ', '_')
        ans = self._add(name, config)
        self._declared.add(_name)
        return ans

    def add(self, name, config):
        if not self._implicit_declaration:
            raise ValueError(
                "Key '%s' not defined in ConfigDict '%s'"
                " and Dict disallows implicit entries" % (name, self.name(True))
            )
        if isinstance(config, ConfigBase):
            ans = self._add(name, config)
        else:
            ans = self._add(name, ConfigValue(config))
        ans._userSet = True
        return ans

    def value(self):
        return {cfg._name: cfg.value() for cfg in self._data.values()}

    def set_value(self, value):
        if value is None:
            return self
        if (type(value) is not dict) and (not isinstance(value, ConfigDict)):
            raise ValueError(
                "Expected dict value for %s.set_value, found %s"
                % (self.name(True), type(value).__name__)
            )
        if not value:
            return self
        _implicit = []
        _decl_map = {}
        for key in value:
            _key = str(key).replace(' ', '_')
            if _key in self._data:
                _decl_map[_key] = key
            elif self._implicit_declaration:
                _implicit.append(key)
            else:
                raise ValueError(
                    "key '%s' not defined for ConfigDict '%s' and "
                    "implicit (undefined) keys are not allowed"
                    % (key, self.name(True))
                )
        # Assign declared values first (in declaration order), then
        # the implicit ones
        for key in self._data:
            if key in _decl_map:
                self._data[key].set_value(value[_decl_map[key]])
        for key in _implicit:
            self.add(key, value[key])
        self._userSet = True
        return self

    def reset(self):
        for key in list(self._data):
            if key in self._declared:
                self._data[key].reset()
            else:
                del self._data[key]
        self._userSet = False
